import sys
from dataclasses import replace
from typing import Any

from routekit.config import AppConfig


def serve(
    target: str,
    config: AppConfig | None = None,
    *,
    dev: bool = False,
    reload: bool | None = None,
    granian_kwargs: dict[str, Any] | None = None,
) -> None:
    """Start a Granian server for the given *target* import path.

    Parameters
    ----------
    target:
        ``"module:var"`` import path understood by Granian.
    config:
        Server settings; defaults to ``AppConfig()``.
    dev:
        When ``True``, applies :meth:`AppConfig.for_development` (reload,
        debug logs, access logs) on top of *config*.
    reload:
        Enable auto-reload.  ``None`` means follow *dev* and *config*.
    """
    from granian import Granian

    config = config or AppConfig()
    if dev:
        config = config.for_development()
    if reload is not None:
        config = replace(config, reload=reload)

    _print_banner(target, config, dev=dev)

    kw: dict[str, Any] = granian_kwargs or {}
    server = Granian(
        target=target,
        address=config.host,
        port=config.port,
        interface="asgi",
        workers=config.workers,
        reload=config.reload,
        log_level=config.log_level,
        log_access=config.log_access,
        **kw,
    )
    server.serve()


# ------------------------------------------------------------------
# Startup banner
# ------------------------------------------------------------------

_CYAN = "\033[36m"
_GREEN = "\033[32m"
_BOLD = "\033[1m"
_RESET = "\033[0m"


def _print_banner(target: str, config: AppConfig, *, dev: bool) -> None:
    color = sys.stdout.isatty()

    def c(code: str, text: str) -> str:
        return f"{code}{text}{_RESET}" if color else text

    mode = "development" if dev else "production"
    lines = [
        f"{c(_BOLD + _CYAN, 'routekit')}   Starting {mode} server",
        "",
        f"{c(_GREEN, 'app')}        {target}",
        f"{c(_GREEN, 'server')}     Granian on http://{config.host}:{config.port}",
        f"{c(_GREEN, 'workers')}    {config.workers}",
        f"{c(_GREEN, 'reload')}     {'enabled' if config.reload else 'disabled'}",
        "",
    ]
    print("\n".join(lines), flush=True)
