"""Applying user configuration to components and documenting them.

A configuration body is a mapping of attribute names to values. A value may
also be a callable standing for an unevaluated expression; it is called with
the evaluation context to produce the value.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import types
import typing
from typing import Any

from plugsdk import docs
from plugsdk.component import (
    Builder,
    Configurable,
    ConfigurableNotify,
    Documented,
    Platform,
    Registry,
)

__all__ = ["Diagnostic", "ConfigurationError", "configure", "documentation"]


@dataclasses.dataclass(frozen=True)
class Diagnostic:
    """A problem found while applying configuration."""

    severity: str = "error"
    summary: str = ""
    detail: str = ""

    def __str__(self) -> str:
        return f"{self.summary}; {self.detail}" if self.detail else self.summary


class ConfigurationError(Exception):
    """Raised when configuration cannot be applied; holds the diagnostics."""

    def __init__(self, diagnostics: list[Diagnostic]) -> None:
        self.diagnostics = list(diagnostics)
        super().__init__(", ".join(str(d) for d in self.diagnostics))


def configure(c: Any, body: Any, ctx: Any = None) -> Any:
    """Configure ``c`` with ``body`` and return the decoded configuration.

    If ``c`` is not configurable, a non-empty body is an error. Returns None
    when there is no configuration object.
    """
    body = {} if body is None else body
    if not isinstance(body, collections.abc.Mapping):
        raise TypeError("configuration body must be a mapping")

    if not isinstance(c, Configurable):
        diagnostics = _unsupported(body)
        if diagnostics:
            raise ConfigurationError(diagnostics)
        return None

    try:
        value = c.config()
    except Exception as err:
        raise ConfigurationError([Diagnostic(summary=str(err))]) from err

    if value is None:
        return None

    diagnostics = _decode_body(body, ctx, value)
    if diagnostics:
        raise ConfigurationError(diagnostics)

    if isinstance(c, ConfigurableNotify):
        try:
            c.config_set(value)
        except Exception as err:
            raise ConfigurationError([Diagnostic(summary=str(err))]) from err

    return value


def documentation(c: Any) -> docs.Documentation:
    """Return the documentation for a component.

    Components that document themselves are asked directly; otherwise the
    documentation is inferred from their configuration and operation.
    """
    if isinstance(c, Documented):
        return c.documentation()

    options: list[docs.Option] = []

    if isinstance(c, Configurable):
        try:
            value = c.config()
        except Exception:
            value = None
        if value is not None:
            options.append(docs.from_config(value))

    if isinstance(c, Builder):
        options.append(docs.from_func(c.build_func()))
    elif isinstance(c, Registry):
        options.append(docs.from_func(c.push_func()))
    elif isinstance(c, Platform):
        options.append(docs.from_func(c.deploy_func()))

    return docs.new(*options)


def _unsupported(names: typing.Iterable[str]) -> list[Diagnostic]:
    return [
        Diagnostic(
            summary="Unsupported argument",
            detail=f'An argument named "{name}" is not expected here.',
        )
        for name in names
    ]


def _decode_body(
    body: collections.abc.Mapping, ctx: Any, target: Any
) -> list[Diagnostic]:
    if isinstance(target, type) or not dataclasses.is_dataclass(target):
        return [
            Diagnostic(
                summary="Invalid configuration target",
                detail=f"expected a dataclass instance, got {type(target).__name__}",
            )
        ]

    hints = docs._field_types(type(target))
    diagnostics: list[Diagnostic] = []
    remaining = dict(body)
    remain_field: str | None = None

    for f in dataclasses.fields(target):
        tag = f.metadata.get("hcl")
        if tag is None:
            continue
        name, *flags = tag.split(",")
        kind = flags[0] if flags else "attr"
        if kind == "remain":
            remain_field = f.name
            continue
        if not name:
            continue

        if name not in remaining:
            if kind != "optional":
                diagnostics.append(
                    Diagnostic(
                        summary="Missing required argument",
                        detail=f'The argument "{name}" is required, '
                        "but no definition was found.",
                    )
                )
            continue

        raw = remaining.pop(name)
        try:
            value = _convert(hints.get(f.name, Any), _evaluate(raw, ctx))
        except (TypeError, ValueError) as err:
            diagnostics.append(
                Diagnostic(
                    summary="Incorrect attribute value type",
                    detail=f'Inappropriate value for attribute "{name}": {err}.',
                )
            )
            continue
        setattr(target, f.name, value)

    if remain_field is not None:
        setattr(target, remain_field, remaining)
    else:
        diagnostics.extend(_unsupported(remaining))

    return diagnostics


def _evaluate(raw: Any, ctx: Any) -> Any:
    if callable(raw) and not isinstance(raw, type):
        return raw(ctx)
    return raw


def _optional_inner(tp: Any) -> Any:
    origin = typing.get_origin(tp)
    if origin is typing.Union or origin is types.UnionType:
        args = typing.get_args(tp)
        others = [arg for arg in args if arg is not type(None)]
        if len(args) == 2 and len(others) == 1:
            return others[0]
    return None


def _convert(tp: Any, value: Any) -> Any:
    if tp is Any or tp is object or isinstance(tp, str):
        return value

    inner = _optional_inner(tp)
    if inner is not None:
        return None if value is None else _convert(inner, value)

    origin = typing.get_origin(tp)
    args = typing.get_args(tp)
    if origin in (list, collections.abc.Sequence):
        if not isinstance(value, (list, tuple)):
            raise TypeError("a list is required")
        element = args[0] if args else Any
        return [_convert(element, item) for item in value]
    if origin in (dict, collections.abc.Mapping):
        if not isinstance(value, collections.abc.Mapping):
            raise TypeError("a map is required")
        element = args[1] if len(args) == 2 else Any
        return {key: _convert(element, item) for key, item in value.items()}

    if tp is bool:
        if not isinstance(value, bool):
            raise TypeError("a bool is required")
        return value
    if tp is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError("a whole number is required")
        return value
    if tp is float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError("a number is required")
        return float(value)
    if tp is str:
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return str(value)
        if not isinstance(value, str):
            raise TypeError("a string is required")
        return value
    return value