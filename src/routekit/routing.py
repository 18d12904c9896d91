"""Route registry and dispatch.

Routes are registered during setup, then the router is frozen and only
read.  Dispatch never raises for unmatched requests: it hands back one of
the two fallback handlers instead.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, NamedTuple

from routekit.errors import RegistrationClosed
from routekit.methods import HttpMethod, normalize_method
from routekit.template import RouteTemplate

logger = logging.getLogger("routekit.routing")

Handler = Callable[..., Any]


def default_not_found(*args: Any, **kwargs: Any) -> HTTPStatus:
    return HTTPStatus.NOT_FOUND


def default_method_not_allowed(*args: Any, **kwargs: Any) -> HTTPStatus:
    return HTTPStatus.METHOD_NOT_ALLOWED


@dataclass(frozen=True, slots=True)
class RouteBinding:
    """A compiled template, an HTTP method and the handler serving them."""

    template: RouteTemplate
    method: str
    handler: Handler

    @property
    def key(self) -> tuple[str, str]:
        return self.template.raw, self.method

    def __repr__(self) -> str:
        return f"RouteBinding({self.method!r}, {self.template.raw!r})"


class Resolution(NamedTuple):
    """Outcome of :meth:`Router.resolve`: the handler to call and its path variables."""

    handler: Handler
    path_params: dict[str, str]


class Router:
    """Registry of route bindings with first-registered-wins dispatch.

    Usage::

        router = Router()
        router.register("/profiles/{id}", "GET", show_profile)
        router.freeze()
        handler, params = router.resolve("/profiles/42", "GET")

    Bindings are keyed by ``(template, method)``; registering the same key
    again replaces the handler but keeps the original registration slot.
    When several templates match one request, the binding registered first
    wins.
    """

    __slots__ = ("_bindings", "_by_method", "_frozen", "_templates", "method_not_allowed", "not_found")

    def __init__(
        self,
        *,
        not_found: Handler = default_not_found,
        method_not_allowed: Handler = default_method_not_allowed,
    ) -> None:
        self.not_found = not_found
        self.method_not_allowed = method_not_allowed
        self._bindings: dict[tuple[str, str], RouteBinding] = {}
        # method -> {raw template -> binding}, each in registration order
        self._by_method: dict[str, dict[str, RouteBinding]] = {}
        # distinct templates in registration order, for the method-agnostic pass
        self._templates: dict[str, RouteTemplate] = {}
        self._frozen = False

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self,
        template: str,
        method: HttpMethod | str,
        handler: Handler,
    ) -> RouteBinding:
        """Bind *handler* to *template* and *method*.

        Raises :class:`~routekit.errors.TemplateError` for a malformed
        template and :class:`~routekit.errors.RegistrationClosed` once the
        router is frozen.
        """
        if self._frozen:
            msg = f"Cannot register {method} {template!r}: router is frozen"
            raise RegistrationClosed(msg)

        compiled = self._templates.get(template)
        if compiled is None:
            compiled = RouteTemplate.compile(template)
        method = normalize_method(method)
        binding = RouteBinding(compiled, method, handler)

        if binding.key in self._bindings:
            logger.debug("Replacing handler for %s %s", method, template)
        else:
            logger.debug("Registered %s %s", method, template)

        self._bindings[binding.key] = binding
        self._by_method.setdefault(method, {})[template] = binding
        self._templates.setdefault(template, compiled)
        return binding

    def freeze(self) -> None:
        """End the registration phase.  Idempotent."""
        if not self._frozen:
            self._frozen = True
            logger.debug("Router frozen with %d route(s)", len(self._bindings))

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def bindings(self) -> list[RouteBinding]:
        """Every registered binding, in registration order."""
        return list(self._bindings.values())

    def __len__(self) -> int:
        return len(self._bindings)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def resolve(self, path: str, method: HttpMethod | str) -> Resolution:
        """Find the handler for *path* and *method*.

        Returns the bound handler with its path variables, the
        method-not-allowed fallback if *path* is only registered for other
        methods, or the not-found fallback otherwise.  Fallbacks always come
        with an empty variable mapping.
        """
        method = normalize_method(method)

        for binding in self._by_method.get(method, {}).values():
            params = binding.template.match(path)
            if params is not None:
                return Resolution(binding.handler, params)

        for template in self._templates.values():
            if template.match(path) is not None:
                return Resolution(self.method_not_allowed, {})

        return Resolution(self.not_found, {})

    def allowed_methods(self, path: str) -> frozenset[str]:
        """Methods with at least one template matching *path*."""
        return frozenset(
            method
            for method, bindings in self._by_method.items()
            if any(b.template.match(path) is not None for b in bindings.values())
        )
