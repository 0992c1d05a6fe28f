"""Documentation of a plugin's configuration, template data and mappers.

Configuration and result types are described with dataclasses. Fields of a
configuration dataclass carry their HCL name in the field metadata under
the ``"hcl"`` key, for example ``{"hcl": "name,optional"}``.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import re
import types
import typing
from typing import Any, Callable

from plugsdk.component import Template

__all__ = [
    "Details",
    "Mapper",
    "FieldDocs",
    "Documentation",
    "SubFieldDoc",
    "SummaryString",
    "Default",
    "EnvVar",
    "Category",
    "Option",
    "new",
    "from_config",
    "request_from_struct",
    "from_func",
    "summary",
    "sub_fields",
    "cleanup_type",
]


@dataclasses.dataclass
class Mapper:
    """A mapper a plugin provides, and the types it converts between."""

    input: str = ""
    output: str = ""
    description: str = ""


@dataclasses.dataclass
class Details:
    """High-level information about a plugin."""

    description: str = ""
    example: str = ""
    input: str = ""
    output: str = ""
    mappers: list[Mapper] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class FieldDocs:
    """Documentation of one attribute, or of a block holding sub-fields."""

    field: str = ""
    type: str = ""
    synopsis: str = ""
    summary: str = ""
    optional: bool = False
    default: str = ""
    env_var: str = ""
    category: bool = False
    sub_fields: list[FieldDocs] = dataclasses.field(default_factory=list)
    discovered_fields: dict[str, FieldDocs] = dataclasses.field(
        default_factory=dict, repr=False
    )


class SummaryString(str):
    """Sets the summary of a field."""


class Default(str):
    """Sets the default value of a field."""


class EnvVar(str):
    """Sets the environment variable a field is read from."""


@dataclasses.dataclass(frozen=True)
class Category:
    """Marks a field as a category; accepted but derived from sub-fields."""

    value: bool = True


def _sorted_fields(fields: dict[str, FieldDocs]) -> list[FieldDocs]:
    return [fields[key] for key in sorted(fields)]


class SubFieldDoc:
    """Documentation for the fields nested inside a block."""

    def __init__(self) -> None:
        self._fields: dict[str, FieldDocs] = {}

    def _merge(self, discovered: dict[str, FieldDocs]) -> None:
        for key, found in discovered.items():
            existing = self._fields.get(key)
            if existing is None:
                self._fields[key] = found
            else:
                existing.type = found.type
                existing.optional = found.optional

    def set_field(self, name: str, synopsis: str, *args: Any) -> None:
        """Create or update the documentation of a nested field."""
        _set_field(self._fields, name, synopsis, args)

    def fields(self) -> list[FieldDocs]:
        """The nested fields, sorted by name."""
        return _sorted_fields(self._fields)


_DOC_OPTION_TYPES = (SummaryString, Default, EnvVar, Category, SubFieldDoc)


def _apply_opts(field_doc: FieldDocs, opts: tuple[Any, ...]) -> None:
    for opt in opts:
        if isinstance(opt, SummaryString):
            field_doc.summary = str(opt)
        elif isinstance(opt, Default):
            field_doc.default = str(opt)
        elif isinstance(opt, EnvVar):
            field_doc.env_var = str(opt)
        elif isinstance(opt, SubFieldDoc):
            if field_doc.discovered_fields:
                opt._merge(field_doc.discovered_fields)
            field_doc.sub_fields = opt.fields()
            field_doc.category = True
        # Category carries no information beyond what sub_fields sets.


def _set_field(
    target: dict[str, FieldDocs], name: str, synopsis: str, opts: tuple[Any, ...]
) -> None:
    for opt in opts:
        if not isinstance(opt, _DOC_OPTION_TYPES):
            raise TypeError(f"invalid documentation option: {opt!r}")
    field_doc = target.get(name)
    if field_doc is None:
        field_doc = FieldDocs(field=name, synopsis=synopsis)
        target[name] = field_doc
    else:
        field_doc.synopsis = synopsis
    _apply_opts(field_doc, opts)


class Documentation:
    """Everything a plugin documents about itself."""

    def __init__(self) -> None:
        self._description = ""
        self._example = ""
        self._input = ""
        self._output = ""
        self._fields: dict[str, FieldDocs] = {}
        self._template_fields: dict[str, FieldDocs] = {}
        self._request_fields: dict[str, FieldDocs] = {}
        self._mappers: list[Mapper] = []

    def example(self, x: str) -> None:
        """Set the example, typically an HCL configuration snippet."""
        self._example = x

    def description(self, x: str) -> None:
        """Set the high-level description."""
        self._description = x

    def input(self, x: str) -> None:
        """Set the type of value accepted from the previous plugin."""
        self._input = x

    def output(self, x: str) -> None:
        """Set the type of value the plugin outputs."""
        self._output = x

    def add_mapper(self, input: str, output: str, description: str) -> None:
        """Record a mapper the plugin makes available."""
        self._mappers.append(
            Mapper(input=input, output=output, description=description)
        )

    def set_field(self, name: str, synopsis: str, *args: Any) -> None:
        """Create or update the documentation of a configuration field."""
        _set_field(self._fields, name, synopsis, args)

    def set_template_field(self, name: str, synopsis: str, *args: Any) -> None:
        """Create or update the documentation of a template field."""
        _set_field(self._template_fields, name, synopsis, args)

    def set_request_field(self, name: str, synopsis: str, *args: Any) -> None:
        """Create or update the documentation of a request field."""
        _set_field(self._request_fields, name, synopsis, args)

    def override_field(self, f: FieldDocs) -> None:
        """Replace the documentation of a configuration field."""
        self._fields[f.field] = f

    def override_template_field(self, f: FieldDocs) -> None:
        """Replace the documentation of a template field."""
        self._template_fields[f.field] = f

    def override_request_field(self, f: FieldDocs) -> None:
        """Replace the documentation of a request field."""
        self._request_fields[f.field] = f

    def details(self) -> Details:
        """The high-level details."""
        return Details(
            description=self._description,
            example=self._example,
            input=self._input,
            output=self._output,
            mappers=list(self._mappers),
        )

    def fields(self) -> list[FieldDocs]:
        """Configuration fields, sorted by name."""
        return _sorted_fields(self._fields)

    def template_fields(self) -> list[FieldDocs]:
        """Template fields, sorted by name."""
        return _sorted_fields(self._template_fields)

    def request_fields(self) -> list[FieldDocs]:
        """Request fields, sorted by name."""
        return _sorted_fields(self._request_fields)


Option = Callable[[Documentation], None]


def new(*args: Option) -> Documentation:
    """Create documentation, applying each option in turn."""
    documentation = Documentation()
    for option in args:
        option(documentation)
    return documentation


def from_config(v: Any) -> Option:
    """Option documenting the fields of a configuration dataclass."""

    def option(d: Documentation) -> None:
        _from_config(v, d._fields)

    return option


def request_from_struct(v: Any) -> Option:
    """Option documenting request fields from a dataclass."""

    def option(d: Documentation) -> None:
        _from_config(v, d._request_fields)

    return option


def from_func(fn: Any) -> Option:
    """Option documenting template fields from an operation's result type.

    ``fn`` may be None, in which case nothing is documented.
    """

    def option(d: Documentation) -> None:
        if fn is None or not callable(fn):
            return
        _extract_template_fields(d, fn)

    return option


def summary(*args: str) -> SummaryString:
    """Join lines into a summary; an empty line starts a new paragraph."""
    parts: list[str] = []
    for i, text in enumerate(args):
        if text == "":
            parts.append("\n")
        if i > 0:
            parts.append(" ")
        parts.append(text.strip())
    return SummaryString("".join(parts))


def sub_fields(f: Callable[[SubFieldDoc], Any]) -> SubFieldDoc:
    """Build the documentation of a block's nested fields."""
    doc = SubFieldDoc()
    f(doc)
    return doc


_TYPE_CLEANUP = {"*": "", "[]": "list of ", "map[": "map of ", "]": " to "}
_TYPE_CLEANUP_RE = re.compile("|".join(re.escape(key) for key in _TYPE_CLEANUP))


def cleanup_type(t: str) -> str:
    """Make a type name nicer to read in documentation."""
    return _TYPE_CLEANUP_RE.sub(lambda m: _TYPE_CLEANUP[m.group(0)], t)


# --- annotation resolution ------------------------------------------------

_TYPING_NAMES: dict[str, Any] = {
    "Any": Any,
    "Optional": typing.Optional,
    "Union": typing.Union,
    "List": list,
    "Dict": dict,
    "Set": set,
    "FrozenSet": frozenset,
    "Tuple": tuple,
    "Sequence": collections.abc.Sequence,
    "MutableSequence": collections.abc.MutableSequence,
    "Mapping": collections.abc.Mapping,
    "MutableMapping": collections.abc.MutableMapping,
    "Iterable": collections.abc.Iterable,
}

_BUILTIN_TYPES: dict[str, type] = {
    "str": str,
    "int": int,
    "float": float,
    "bool": bool,
    "bytes": bytes,
    "bytearray": bytearray,
    "complex": complex,
    "list": list,
    "dict": dict,
    "set": set,
    "frozenset": frozenset,
    "tuple": tuple,
    "object": object,
    "type": type,
}

_TOKEN_RE = re.compile(r"\.\.\.|[A-Za-z_][\w.]*|\S")


class _Unresolved(Exception):
    """An annotation string that cannot be turned into a type."""


class _AnnotationParser:
    """Turns annotation strings such as ``list[Foo] | None`` into types."""

    def __init__(self, text: str, namespace: dict[str, Any]) -> None:
        self._tokens = [
            tok for tok in _TOKEN_RE.findall(text) if tok not in ("'", '"')
        ]
        self._pos = 0
        self._namespace = namespace

    def parse(self) -> Any:
        result = self._union()
        if self._pos != len(self._tokens):
            raise _Unresolved(self._tokens[self._pos])
        return result

    def _peek(self) -> str | None:
        return self._tokens[self._pos] if self._pos < len(self._tokens) else None

    def _take(self) -> str:
        token = self._peek()
        if token is None:
            raise _Unresolved("unexpected end")
        self._pos += 1
        return token

    def _union(self) -> Any:
        parts = [self._primary()]
        while self._peek() == "|":
            self._take()
            parts.append(self._primary())
        if len(parts) == 1:
            return parts[0]
        return typing.Union[tuple(parts)]

    def _primary(self) -> Any:
        token = self._take()
        if token == "...":
            return Ellipsis
        if not (token[0].isalpha() or token[0] == "_"):
            raise _Unresolved(token)
        base = self._lookup(token)
        if self._peek() != "[":
            return base
        self._take()
        args = [self._union()]
        while self._peek() == ",":
            self._take()
            args.append(self._union())
        if self._take() != "]":
            raise _Unresolved("expected ]")
        try:
            return base[args[0] if len(args) == 1 else tuple(args)]
        except TypeError as err:
            raise _Unresolved(token) from err

    def _lookup(self, name: str) -> Any:
        if name == "None":
            return type(None)
        parts = name.split(".")
        dotted = len(parts) > 1
        if not dotted and name in self._namespace:
            return self._namespace[name]
        last = parts[-1]
        if last in _TYPING_NAMES:
            return _TYPING_NAMES[last]
        if not dotted and name in _BUILTIN_TYPES:
            return _BUILTIN_TYPES[name]
        if dotted:
            # A qualified name such as ``module.Foo``: use ``Foo`` if the
            # module's namespace has a class of that name.
            candidate = self._namespace.get(last)
            if isinstance(candidate, type):
                return candidate
        raise _Unresolved(name)


def _namespace(obj: Any) -> dict[str, Any]:
    """The names an object's annotations were written against."""
    if isinstance(obj, type):
        names: dict[str, Any] = {}
        for member in vars(obj).values():
            found = getattr(member, "__globals__", None)
            if isinstance(found, dict):
                names.update(found)
                break
        names[obj.__name__] = obj
        return names
    found = getattr(obj, "__globals__", None)
    if not isinstance(found, dict):
        found = getattr(getattr(obj, "__func__", None), "__globals__", None)
    return dict(found) if isinstance(found, dict) else {}


def _resolve(annotation: Any, namespace: dict[str, Any]) -> Any:
    if not isinstance(annotation, str):
        return annotation
    try:
        return _AnnotationParser(annotation, namespace).parse()
    except _Unresolved:
        return annotation


def _field_types(cls: type) -> dict[str, Any]:
    """Resolved types of a dataclass's fields, by field name."""
    namespace = _namespace(cls)
    return {f.name: _resolve(f.type, namespace) for f in dataclasses.fields(cls)}


# --- type inspection ------------------------------------------------------

_PRIMITIVE_NAMES: dict[Any, str] = {
    str: "string",
    int: "int",
    bool: "bool",
    float: "float64",
    bytes: "[]byte",
    complex: "complex128",
}

_SEQUENCE_ORIGINS = (
    list,
    tuple,
    set,
    frozenset,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
    collections.abc.Iterable,
)

_MAPPING_ORIGINS = (dict, collections.abc.Mapping, collections.abc.MutableMapping)


def _is_class(tp: Any) -> bool:
    return isinstance(tp, type) and typing.get_origin(tp) is None


def _is_union(tp: Any) -> bool:
    origin = typing.get_origin(tp)
    return origin is typing.Union or origin is types.UnionType


def _optional_inner(tp: Any) -> Any:
    """The X in Optional[X], or None if tp is not such a type."""
    if _is_union(tp):
        args = typing.get_args(tp)
        others = [arg for arg in args if arg is not type(None)]
        if len(args) == 2 and len(others) == 1:
            return others[0]
    return None


def _type_name(tp: Any) -> str:
    if tp is Any or tp is object:
        return "interface {}"
    if tp is None or tp is type(None):
        return "nil"
    if isinstance(tp, str):
        return tp
    inner = _optional_inner(tp)
    if inner is not None:
        return "*" + _type_name(inner)
    origin = typing.get_origin(tp)
    args = typing.get_args(tp)
    if origin in _MAPPING_ORIGINS:
        key, value = args if len(args) == 2 else (Any, Any)
        return f"map[{_type_name(key)}]{_type_name(value)}"
    if origin in _SEQUENCE_ORIGINS:
        return "[]" + _type_name(args[0] if args else Any)
    if _is_union(tp):
        return " | ".join(_type_name(arg) for arg in args)
    if tp in _PRIMITIVE_NAMES:
        return _PRIMITIVE_NAMES[tp]
    if tp in (list, tuple, set, frozenset):
        return "[]interface {}"
    if tp is dict:
        return "map[interface {}]interface {}"
    if _is_class(tp):
        return tp.__name__
    return str(tp)


def _element_type(tp: Any) -> Any:
    """Strip Optional and sequence wrappers from a type."""
    while True:
        inner = _optional_inner(tp)
        if inner is not None:
            tp = inner
            continue
        if typing.get_origin(tp) in _SEQUENCE_ORIGINS and typing.get_args(tp):
            tp = typing.get_args(tp)[0]
            continue
        return tp


def _from_config(v: Any, target: dict[str, FieldDocs]) -> None:
    if not dataclasses.is_dataclass(v):
        raise TypeError("invalid config type, must be a dataclass")
    cls = v if isinstance(v, type) else type(v)
    hints = _field_types(cls)

    for f in dataclasses.fields(cls):
        tag = f.metadata.get("hcl")
        if tag is None:
            raise ValueError(f"missing hcl tag on field: {f.name}")
        name, *flags = tag.split(",")
        if not name:
            continue

        tp = hints.get(f.name, f.type)
        field_doc = FieldDocs(
            field=name,
            type=cleanup_type(_type_name(tp)),
            optional="optional" in flags,
        )

        element = _element_type(tp)
        if _is_class(element) and dataclasses.is_dataclass(element):
            nested: dict[str, FieldDocs] = {}
            _from_config(element, nested)
            field_doc.discovered_fields = nested

        target[name] = field_doc


def _to_snake(name: str) -> str:
    name = re.sub(r"[\s\-.]+", "_", name.strip())
    name = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    name = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)
    return name.lower()


_NO_RETURN = object()


def _return_type(fn: Any) -> Any:
    annotations = getattr(fn, "__annotations__", None)
    if not isinstance(annotations, dict) or "return" not in annotations:
        return _NO_RETURN
    return _resolve(annotations["return"], _namespace(fn))


def _extract_template_fields(d: Documentation, fn: Any) -> None:
    out = _return_type(fn)
    if out is _NO_RETURN or out is None or out is type(None):
        return

    # A tuple result documents its first element; the rest is error status.
    if typing.get_origin(out) is tuple and typing.get_args(out):
        out = typing.get_args(out)[0]

    while True:
        if _is_class(out) and issubclass(out, Template):
            _extract_template_fields_from_impl(d, out)
            return
        inner = _optional_inner(out)
        if inner is None:
            break
        out = inner

    if not (_is_class(out) and dataclasses.is_dataclass(out)):
        return

    hints = _field_types(out)
    for f in dataclasses.fields(out):
        if f.name.startswith("_") or f.name.startswith("XXX_"):
            continue
        name = _to_snake(f.name)
        d._template_fields[name] = FieldDocs(
            field=name, type=cleanup_type(_type_name(hints.get(f.name, f.type)))
        )


def _extract_template_fields_from_impl(d: Documentation, cls: type) -> None:
    try:
        instance = cls()
    except TypeError:
        instance = cls.__new__(cls)
    for key, value in instance.template_data().items():
        d._template_fields[key] = FieldDocs(
            field=key, type=cleanup_type(_type_name(type(value)))
        )