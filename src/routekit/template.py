"""URI template compilation and matching.

A template such as ``/profiles/{id}/settings`` is compiled once, at
registration time, into an anchored pattern in which every ``{name}``
placeholder captures exactly one non-empty path segment.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from routekit.errors import TemplateError

_SEGMENT_REGEX = r"[^/]+"


@dataclass(frozen=True, slots=True)
class Segment:
    """A parsed piece of a template.

    Literal:  ``/profiles/``  (is_variable=False)
    Variable: ``{id}``        (is_variable=True, value="id")
    """

    value: str
    is_variable: bool = False


@dataclass(frozen=True, slots=True)
class RouteTemplate:
    """A compiled URI template.  Immutable and safe to share across threads.

    Usage::

        template = RouteTemplate.compile("/profiles/{id}")
        template.match("/profiles/42")    # {"id": "42"}
        template.match("/profiles/42/")   # {"id": "42"}
        template.match("/profiles")       # None
    """

    raw: str
    pattern: re.Pattern[str]
    segments: tuple[Segment, ...]
    variables: tuple[str, ...]

    @classmethod
    def compile(cls, template: str) -> RouteTemplate:
        """Compile *template*, raising :class:`TemplateError` if it is malformed."""
        if not template:
            raise TemplateError(template, "template is empty")
        if not template.startswith("/"):
            raise TemplateError(template, "template must start with '/'")
        if "//" in template:
            raise TemplateError(template, f"empty path segment at position {template.index('//') + 1}")

        # A trailing slash is always optional; fold an explicit one into it.
        body = template[:-1] if template.endswith("/") else template

        segments: list[Segment] = []
        variables: list[str] = []
        parts: list[str] = []
        literal_start = 0
        i = 0

        while i < len(body):
            char = body[i]
            if char == "}":
                raise TemplateError(template, f"unmatched '}}' at position {i}")
            if char != "{":
                i += 1
                continue

            end = body.find("}", i + 1)
            if end == -1:
                raise TemplateError(template, f"unclosed '{{' at position {i}")
            name = body[i + 1 : end]
            if "{" in name:
                raise TemplateError(template, f"nested '{{' at position {i}")
            if not name:
                raise TemplateError(template, f"empty placeholder '{{}}' at position {i}")
            if not name.isidentifier():
                raise TemplateError(template, f"placeholder {name!r} is not a valid identifier")
            if name in variables:
                raise TemplateError(template, f"duplicate placeholder {name!r}")
            if body[i - 1] != "/" or body[end + 1 : end + 2] not in ("", "/"):
                raise TemplateError(template, f"placeholder {name!r} must fill a whole path segment")

            literal = body[literal_start:i]
            if literal:
                segments.append(Segment(literal))
                parts.append(re.escape(literal))
            segments.append(Segment(name, is_variable=True))
            parts.append(f"(?P<{name}>{_SEGMENT_REGEX})")
            variables.append(name)
            i = literal_start = end + 1

        tail = body[literal_start:]
        if tail:
            segments.append(Segment(tail))
            parts.append(re.escape(tail))
        parts.append("/?")

        return cls(
            raw=template,
            pattern=re.compile("".join(parts)),
            segments=tuple(segments),
            variables=tuple(variables),
        )

    def match(self, path: str) -> dict[str, str] | None:
        """Return the extracted variables if *path* matches in full, else ``None``."""
        m = self.pattern.fullmatch(path)
        if m is None:
            return None
        return m.groupdict()

    def __str__(self) -> str:
        return self.raw
