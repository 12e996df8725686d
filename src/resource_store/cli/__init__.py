"""Command-line interface for resource-store."""
