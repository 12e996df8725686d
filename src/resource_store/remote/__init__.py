"""Remote (HTTP) backend subpackage.

Public surface
--------------
- HTTPMethod, HTTPServer, HTTPRequest, HTTPResponse  — HTTP value types
- RequestStage, ResponseStage and the built-in stages
- HTTPTransport, HttpxTransport, NetworkService      — dispatch
- RemoteBackend                                      — typed REST client
"""
from __future__ import annotations

from resource_store.remote.backend import RemoteBackend
from resource_store.remote.http import HTTPMethod, HTTPRequest, HTTPResponse, HTTPServer
from resource_store.remote.pipeline import (
    DefaultHeaders,
    JsonHeaders,
    LogRequest,
    LogResponse,
    RequestStage,
    ResponseStage,
    ValidateStatusCode,
)
from resource_store.remote.service import HTTPTransport, HttpxTransport, NetworkService

__all__ = [
    "DefaultHeaders",
    "HTTPMethod",
    "HTTPRequest",
    "HTTPResponse",
    "HTTPServer",
    "HTTPTransport",
    "HttpxTransport",
    "JsonHeaders",
    "LogRequest",
    "LogResponse",
    "NetworkService",
    "RemoteBackend",
    "RequestStage",
    "ResponseStage",
    "ValidateStatusCode",
]
