"""Shared type definitions for autoroute."""

from collections.abc import Awaitable, Callable
from typing import Any, Literal

# Route URL path (e.g., "/", "/posts", "/posts/{id}/edit")
type RoutePath = str

# Template identifier: route-like path without extension (e.g., "/posts/index")
type ViewKey = str

# HTTP methods the action vocabulary maps onto
type HttpMethod = Literal["GET", "POST"]

# Name from the fixed action vocabulary
type ActionName = Literal["index", "create", "select", "update", "edit", "save", "delete"]

# Controller action: sync or async, receives the request and/or path params
type ActionFunc = Callable[..., Any]

# Chirp-shaped middleware: async (request, next) -> response
type MiddlewareFunc = Callable[[Any, Callable[[Any], Awaitable[Any]]], Awaitable[Any]]
