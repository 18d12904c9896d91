"""Routekit exception hierarchy.

Only configuration problems are exceptions.  A request that matches no
route is an ordinary outcome handled by the router's fallback handlers.
"""


class RoutekitError(Exception):
    """Base for all routekit-specific errors."""


class TemplateError(RoutekitError, ValueError):
    """Raised when a URI template cannot be compiled.

    Carries the offending *template* so startup failures point straight at
    the broken route.
    """

    def __init__(self, template: str, reason: str) -> None:
        self.template = template
        self.reason = reason
        super().__init__(f"Invalid route template {template!r}: {reason}")


class RegistrationClosed(RoutekitError, RuntimeError):  # noqa: N818
    """Raised when a route is registered after the router was frozen."""
