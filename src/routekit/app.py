"""Routekit ASGI application."""

from __future__ import annotations

import asyncio
import inspect
import logging
import sys
import traceback
from collections.abc import Callable, Iterable
from dataclasses import replace
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from routekit._types import Receive, Scope, Send
from routekit.config import AppConfig
from routekit.methods import HttpMethod, normalize_method
from routekit.request import Request
from routekit.response import JSONResponse, Response
from routekit.routing import Handler, Router
from routekit.template import RouteTemplate
from routekit.validation import validate_handler_signature

logger = logging.getLogger("routekit.app")


class _HandlerMeta:
    """Pre-computed handler metadata, built once per handler."""

    __slots__ = ("accepts_kwargs", "handler", "is_coroutine", "param_names", "wants_request")

    def __init__(self, handler: Callable[..., Any]) -> None:
        self.handler = handler
        self.is_coroutine = inspect.iscoroutinefunction(handler)
        params = inspect.signature(handler).parameters
        self.wants_request = "request" in params
        self.accepts_kwargs = any(p.kind is inspect.Parameter.VAR_KEYWORD for p in params.values())
        self.param_names = frozenset(params) - {"request"}


async def not_found_response(request: Request) -> JSONResponse:
    """Default fallback when no template matches the path."""
    return JSONResponse({"detail": "Not Found"}, status_code=404)


async def method_not_allowed_response(request: Request) -> JSONResponse:
    """Default fallback when the path matches but the method does not."""
    headers: dict[str, str] = {}
    if request.app is not None:
        headers["Allow"] = ", ".join(sorted(request.app.router.allowed_methods(request.path)))
    return JSONResponse({"detail": "Method Not Allowed"}, status_code=405, headers=headers)


class App:
    """ASGI 3.0 web application.

    Parameters
    ----------
    strict:
        When ``True``, handler signatures are validated against their route
        at registration time (see :mod:`routekit.validation`).
    debug:
        When ``True``, 500 responses include the full traceback.
    config:
        Full :class:`AppConfig`; takes precedence over *strict* and *debug*.
    not_found, method_not_allowed:
        Replacement fallback handlers.  They are invoked like any other
        handler but never receive path variables.
    """

    def __init__(
        self,
        *,
        strict: bool = False,
        debug: bool = False,
        config: AppConfig | None = None,
        not_found: Handler | None = None,
        method_not_allowed: Handler | None = None,
    ) -> None:
        self.config = config or AppConfig(strict=strict, debug=debug)
        self.router = Router(
            not_found=not_found or not_found_response,
            method_not_allowed=method_not_allowed or method_not_allowed_response,
        )
        self._handler_meta: dict[Callable[..., Any], _HandlerMeta] = {
            h: _HandlerMeta(h) for h in (self.router.not_found, self.router.method_not_allowed)
        }

    @property
    def strict(self) -> bool:
        return self.config.strict

    @property
    def debug(self) -> bool:
        return self.config.debug

    # ------------------------------------------------------------------
    # Route registration
    # ------------------------------------------------------------------

    def route(
        self,
        path: str,
        methods: Iterable[HttpMethod | str] = (HttpMethod.GET,),
    ) -> Callable[..., Any]:
        def decorator(handler: Callable[..., Any]) -> Callable[..., Any]:
            for method in methods:
                if self.strict:
                    validate_handler_signature(handler, RouteTemplate.compile(path), normalize_method(method))
                self.router.register(path, method, handler)
            self._handler_meta[handler] = _HandlerMeta(handler)
            return handler

        return decorator

    def get(self, path: str) -> Callable[..., Any]:
        return self.route(path, (HttpMethod.GET,))

    def post(self, path: str) -> Callable[..., Any]:
        return self.route(path, (HttpMethod.POST,))

    def put(self, path: str) -> Callable[..., Any]:
        return self.route(path, (HttpMethod.PUT,))

    def delete(self, path: str) -> Callable[..., Any]:
        return self.route(path, (HttpMethod.DELETE,))

    def patch(self, path: str) -> Callable[..., Any]:
        return self.route(path, (HttpMethod.PATCH,))

    def options(self, path: str) -> Callable[..., Any]:
        return self.route(path, (HttpMethod.OPTIONS,))

    def head(self, path: str) -> Callable[..., Any]:
        return self.route(path, (HttpMethod.HEAD,))

    # ------------------------------------------------------------------
    # ASGI interface
    # ------------------------------------------------------------------

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        scope["app"] = self
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return
        if scope["type"] != "http":
            return

        # Registration ends at the latest with the first request.
        self.router.freeze()
        await self._handle(scope, receive, send)

    async def _handle(self, scope: Scope, receive: Receive, send: Send) -> None:
        handler, path_params = self.router.resolve(scope["path"], scope["method"])
        request = Request(scope, receive, path_params)

        try:
            response = await self._invoke(handler, request, path_params)
        except Exception:
            logger.exception("Unhandled error in handler for %s %s", scope["method"], scope["path"])
            body: dict[str, Any] = {"detail": "Internal Server Error"}
            if self.debug:
                body["traceback"] = traceback.format_exc()
            await JSONResponse(body, status_code=500).send(send)
            return

        await _send_response(response, send)

    async def _invoke(
        self,
        handler: Callable[..., Any],
        request: Request,
        path_params: dict[str, str],
    ) -> Any:
        meta = self._handler_meta.get(handler)
        if meta is None:
            # Registered directly on the router rather than through a decorator.
            meta = self._handler_meta.setdefault(handler, _HandlerMeta(handler))
        if meta.accepts_kwargs:
            kwargs: dict[str, Any] = dict(path_params)
        else:
            kwargs = {name: path_params[name] for name in meta.param_names if name in path_params}
        if meta.wants_request:
            kwargs["request"] = request

        if meta.is_coroutine:
            return await handler(**kwargs)
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, lambda: handler(**kwargs))

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Freeze the router on startup; shutdown is a no-op."""
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                self.router.freeze()
                logger.info("Serving %d route(s)", len(self.router))
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    # ------------------------------------------------------------------
    # Granian convenience
    # ------------------------------------------------------------------

    def run(
        self,
        host: str | None = None,
        port: int | None = None,
        *,
        dev: bool = False,
        **granian_kwargs: Any,
    ) -> None:
        """Start the app with Granian.

        Server settings come from :attr:`config`; *host* and *port* override
        it and *dev* switches on reload, debug logging, and access logs.
        """
        from routekit._server import serve

        config = self.config
        if host is not None:
            config = replace(config, host=host)
        if port is not None:
            config = replace(config, port=port)

        serve(_resolve_target(self), config, dev=dev, granian_kwargs=granian_kwargs or None)


# ------------------------------------------------------------------
# Module-level helpers
# ------------------------------------------------------------------


def _resolve_target(app: App) -> str:
    """Derive a ``"module:var"`` string for the given app instance.

    Searches ``__main__`` for a module-level variable whose value *is* the
    app.  Falls back to the caller's ``__file__`` stem when running as a
    script (``python main.py``) so Granian workers can import it.
    """
    main = sys.modules.get("__main__")
    if main is None:
        raise RuntimeError("Cannot auto-detect Granian target: __main__ module not found.")

    var_name: str | None = None
    for name, val in vars(main).items():
        if val is app:
            var_name = name
            break

    if var_name is None:
        raise RuntimeError(
            "Cannot auto-detect Granian target: no module-level variable in "
            "__main__ references this App instance. "
            "Start it with the CLI instead, e.g. `routekit run myapp:app`."
        )

    spec = getattr(main, "__spec__", None)
    module_name: str | None = spec.name if spec else None
    if not module_name:
        # Running as a script: use the filename stem so granian can import it.
        main_file = getattr(main, "__file__", None)
        module_name = Path(main_file).stem if main_file else None

    return f"{module_name}:{var_name}"


async def _send_response(response: Any, send: Send) -> None:
    if isinstance(response, Response):
        await response.send(send)
    elif isinstance(response, BaseModel | dict | list):
        await JSONResponse(response).send(send)
    else:
        await Response(str(response)).send(send)
