"""Routekit command-line interface powered by Typer."""

import importlib
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer

from routekit.errors import RoutekitError

if TYPE_CHECKING:
    from routekit.app import App

app = typer.Typer(name="routekit", add_completion=False, no_args_is_help=True)


# ------------------------------------------------------------------
# Target resolution
# ------------------------------------------------------------------


def _resolve_cli_target(path: str) -> str:
    """Turn a CLI *path* argument into a ``"module:var"`` string.

    Accepted forms:
    - ``module:var``   → returned as-is
    - ``file.py``      → imports ``file``, scans for an App instance
    """
    if ":" in path:
        return path

    # Treat as a Python file
    file = Path(path)
    if not file.exists():
        typer.echo(f"Error: file {path!r} not found.", err=True)
        raise typer.Exit(1)

    module_name = file.stem

    # Ensure the file's directory is on sys.path so we can import it.
    parent = str(file.resolve().parent)
    if parent not in sys.path:
        sys.path.insert(0, parent)

    mod = _import(module_name)
    var_name = _find_app_var(mod)
    if var_name is None:
        typer.echo(
            f"Error: no App instance found in {path!r}. Provide an explicit target, e.g. main:app",
            err=True,
        )
        raise typer.Exit(1)

    return f"{module_name}:{var_name}"


def _load_app(path: str) -> "App":
    """Import the App instance behind a CLI *path* argument."""
    from routekit.app import App

    module_name, _, var_name = _resolve_cli_target(path).partition(":")
    instance = getattr(_import(module_name), var_name, None)
    if not isinstance(instance, App):
        typer.echo(f"Error: {module_name}:{var_name} is not a routekit App instance.", err=True)
        raise typer.Exit(1)
    return instance


def _import(module_name: str) -> object:
    try:
        return importlib.import_module(module_name)
    except RoutekitError as exc:
        typer.echo(f"Error: invalid route table in {module_name!r}: {exc}", err=True)
        raise typer.Exit(1) from exc
    except Exception as exc:
        typer.echo(f"Error importing {module_name!r}: {exc}", err=True)
        raise typer.Exit(1) from exc


def _find_app_var(mod: object) -> str | None:
    """Scan a module for an ``App`` instance.

    Checks ``app`` and ``application`` first, then falls back to any attribute.
    """
    from routekit.app import App

    for name in ("app", "application"):
        val = getattr(mod, name, None)
        if isinstance(val, App):
            return name

    for name in dir(mod):
        if name.startswith("_"):
            continue
        if isinstance(getattr(mod, name, None), App):
            return name

    return None


def _handler_name(handler: object) -> str:
    return getattr(handler, "__qualname__", None) or getattr(handler, "__name__", None) or repr(handler)


# ------------------------------------------------------------------
# Commands
# ------------------------------------------------------------------


@app.command()
def dev(
    path: Annotated[str, typer.Argument(help="Python file or module:var target.")] = "main.py",
    host: Annotated[str, typer.Option(help="Bind address.")] = "127.0.0.1",
    port: Annotated[int, typer.Option(help="Bind port.")] = 8000,
    reload: Annotated[bool | None, typer.Option("--reload/--no-reload", help="Auto-reload on code changes.")] = None,
) -> None:
    """Start a development server with auto-reload and debug logging."""
    from routekit._server import serve
    from routekit.config import AppConfig

    target = _resolve_cli_target(path)
    serve(target, AppConfig(host=host, port=port), dev=True, reload=reload)


@app.command()
def run(
    path: Annotated[str, typer.Argument(help="Python file or module:var target.")] = "main.py",
    host: Annotated[str, typer.Option(help="Bind address.")] = "127.0.0.1",
    port: Annotated[int, typer.Option(help="Bind port.")] = 8000,
    workers: Annotated[int, typer.Option(help="Number of worker processes.")] = 1,
    log_level: Annotated[str, typer.Option(help="Granian log level.")] = "info",
    access_log: Annotated[bool, typer.Option("--access-log/--no-access-log", help="Log every request.")] = False,
) -> None:
    """Start a production server."""
    from routekit._server import serve
    from routekit.config import AppConfig

    target = _resolve_cli_target(path)
    config = AppConfig(host=host, port=port, workers=workers, log_level=log_level, log_access=access_log)
    serve(target, config)


@app.command()
def routes(
    path: Annotated[str, typer.Argument(help="Python file or module:var target.")] = "main.py",
) -> None:
    """List registered routes in registration order."""
    bindings = _load_app(path).router.bindings
    if not bindings:
        typer.echo("No routes registered.")
        return

    rows = [(b.method, b.template.raw, _handler_name(b.handler)) for b in bindings]
    width_method = max(6, *(len(r[0]) for r in rows))
    width_path = max(4, *(len(r[1]) for r in rows))
    typer.echo(f"{'METHOD':<{width_method}}  {'PATH':<{width_path}}  HANDLER")
    for method, template, handler in rows:
        typer.echo(f"{method:<{width_method}}  {template:<{width_path}}  {handler}")


@app.command()
def resolve(
    method: Annotated[str, typer.Argument(help="HTTP method token, e.g. GET.")],
    request_path: Annotated[str, typer.Argument(metavar="PATH", help="Request path, e.g. /profiles/42.")],
    path: Annotated[str, typer.Option("--app", help="Python file or module:var target.")] = "main.py",
) -> None:
    """Show which handler a request would be dispatched to."""
    router = _load_app(path).router
    handler, params = router.resolve(request_path, method)

    if handler is router.not_found:
        typer.echo(f"{method.upper()} {request_path} -> not found (404)")
        raise typer.Exit(1)
    if handler is router.method_not_allowed:
        allowed = ", ".join(sorted(router.allowed_methods(request_path)))
        typer.echo(f"{method.upper()} {request_path} -> method not allowed (405), allowed: {allowed}")
        raise typer.Exit(1)

    typer.echo(f"{method.upper()} {request_path} -> {_handler_name(handler)}")
    for name, value in params.items():
        typer.echo(f"  {name} = {value!r}")
