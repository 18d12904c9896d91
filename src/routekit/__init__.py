"""Minimal HTTP request router with a thin ASGI application around it."""

__version__ = "0.1.0"

from routekit.app import App
from routekit.config import AppConfig
from routekit.errors import RegistrationClosed, RoutekitError, TemplateError
from routekit.methods import HttpMethod
from routekit.request import Request
from routekit.response import JSONResponse, Response
from routekit.routing import Resolution, RouteBinding, Router
from routekit.template import RouteTemplate

__all__ = [
    "App",
    "AppConfig",
    "HttpMethod",
    "JSONResponse",
    "RegistrationClosed",
    "Request",
    "Resolution",
    "Response",
    "RouteBinding",
    "RouteTemplate",
    "Router",
    "RoutekitError",
    "TemplateError",
]
