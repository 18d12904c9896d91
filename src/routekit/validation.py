"""Handler signature validation for strict mode."""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any, get_type_hints

from pydantic import BaseModel

from routekit.response import Response

if TYPE_CHECKING:
    from routekit.template import RouteTemplate


def _is_basemodel(tp: Any) -> bool:
    """Return True if *tp* is a BaseModel subclass."""
    return isinstance(tp, type) and issubclass(tp, BaseModel)


def validate_handler_signature(func: Any, template: RouteTemplate, method: str) -> None:
    """Validate a handler's signature against its route at registration time.

    Raises :class:`TypeError` with an actionable message when the handler
    violates strict-mode rules.
    """
    name = getattr(func, "__name__", repr(func))
    where = f"handler '{name}' [{method} {template.raw}]"
    hints = get_type_hints(func)
    params = inspect.signature(func).parameters

    # --- Rule 1: Return type annotation must exist ---
    ret = hints.get("return")
    if ret is None:
        raise TypeError(
            f"\n\nStrict-mode violation in {where}\n"
            f"  Problem: Missing return type annotation.\n"
            f"  Fix:     Add a return type, e.g. -> JSONResponse or -> YourModel.\n"
        )

    # --- Rule 2: Return type must be structured ---
    if not ((isinstance(ret, type) and issubclass(ret, Response)) or _is_basemodel(ret)):
        label = ret.__name__ if isinstance(ret, type) else repr(ret)
        raise TypeError(
            f"\n\nStrict-mode violation in {where}\n"
            f"  Current: -> {label}\n"
            f"  Problem: Return type must be a Response subclass or BaseModel subclass.\n"
            f"  Fix:     Use -> JSONResponse, -> Response, or -> YourModel(BaseModel).\n"
        )

    accepts_any = any(p.kind is inspect.Parameter.VAR_KEYWORD for p in params.values())

    # --- Rule 3: Every path variable reaches the handler as a typed str ---
    for variable in template.variables:
        if variable not in params:
            if accepts_any:
                continue
            raise TypeError(
                f"\n\nStrict-mode violation in {where}\n"
                f"  Problem: Path variable '{variable}' has no matching parameter.\n"
                f"  Fix:     Add a parameter, e.g. {variable}: str.\n"
            )
        hint = hints.get(variable)
        if hint is None:
            raise TypeError(
                f"\n\nStrict-mode violation in {where}\n"
                f"  Problem: Parameter '{variable}' has no type annotation.\n"
                f"  Fix:     Annotate it as {variable}: str.\n"
            )
        if hint is not str:
            raise TypeError(
                f"\n\nStrict-mode violation in {where}\n"
                f"  Current: {variable}: {getattr(hint, '__name__', repr(hint))}\n"
                f"  Problem: Path variables are passed as strings.\n"
                f"  Fix:     Annotate it as {variable}: str and convert inside the handler.\n"
            )

    # --- Rule 4: No parameters the router cannot supply ---
    for param_name, param in params.items():
        if param_name == "request" or param_name in template.variables:
            continue
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        if param.default is not inspect.Parameter.empty:
            continue
        raise TypeError(
            f"\n\nStrict-mode violation in {where}\n"
            f"  Problem: Parameter '{param_name}' is not a path variable of {template.raw!r}.\n"
            f"  Fix:     Add '{{{param_name}}}' to the template, give it a default, or remove it.\n"
        )
