"""
flagtree dataclass binding.

Scope
- from_dataclass(): derive a Registry from a dataclass, one flag per init field.
- to_dataclass(): write a parse Result back onto a dataclass instance.
- bind(): derive, parse and apply in one call.

Field mapping
- key: field.metadata["key"], else the lowercased field name.
- short: field.metadata["short"], else the first character of the key; dropped
  when another flag of the same registry already uses it.
- help / param_help: field.metadata["help"] / field.metadata["param_help"].
- kind: field.metadata["kind"] when given, else
  • bool             → Kind.SWITCH
  • nested dataclass → Kind.SUB (child registry derived recursively)
  • anything else    → Kind.OPTIONAL, default = str(field default) when the
    field has a plain default.

Value conversion (to_dataclass)
- switch → True; sub → applied recursively to the nested instance.
- str, int, float: called on the string value.
- bool: "true", "1", "yes", "on" (any case) are True, "false", "0", "no",
  "off" are False; anything else fails.
- any other callable type is called with the string value.
- flags given without a value (and with no default) leave the field untouched.

Quick example:
    >>> @dataclasses.dataclass
    ... class Options:
    ...     verbose: bool = False
    ...     level: int = 1
    >>> options, result = bind(Options, ["-v", "--level", "3"])
    >>> options
    Options(verbose=True, level=3)
"""
import dataclasses
import types
import typing

from .faults import ConversionError, KeyNotFoundError
from .flags import Kind, Registry


_TRUTHY = frozenset({"true", "1", "yes", "on"})
_FALSY = frozenset({"false", "0", "no", "off"})


def _boolean(value, /):
    if value.lower() in _TRUTHY:
        return True
    if value.lower() in _FALSY:
        return False
    raise ValueError("%r is not a boolean" % value)


def _unwrap(annotation, /):
    """
    reduce "X | None" (or Optional[X]) to X; anything else is returned as is.
    """
    if typing.get_origin(annotation) in (typing.Union, types.UnionType):
        arguments = [argument for argument in typing.get_args(annotation) if argument is not type(None)]
        if len(arguments) == 1:
            return arguments[0]
    return annotation


def _fields(cls, /):
    """
    yield (field, resolved type, key) for every init field of a dataclass.
    """
    hints = typing.get_type_hints(cls)
    for field in dataclasses.fields(cls):
        if not field.init:
            continue
        yield field, _unwrap(hints.get(field.name, field.type)), field.metadata.get("key", field.name.lower())


def _dataclass(cls_or_instance, /):
    if not dataclasses.is_dataclass(cls_or_instance):
        raise TypeError("expected a dataclass or dataclass instance, got %r" % type(cls_or_instance).__name__)
    return cls_or_instance if isinstance(cls_or_instance, type) else type(cls_or_instance)


def _default(field, /):
    if field.default is not dataclasses.MISSING and field.default is not None:
        return str(field.default)
    return ""


def from_dataclass(cls_or_instance, /):
    """
    Build a Registry from a dataclass (class or instance).

    Raises
    - TypeError when the argument is not a dataclass.
    - any definition fault (InvalidKeyError, DuplicateKeyError, ...) for bad metadata.
    """
    cls = _dataclass(cls_or_instance)
    registry = Registry()

    for field, annotation, key in _fields(cls):
        short = field.metadata.get("short", key[:1])
        if registry.short(short) is not None:
            short = ""
        help = field.metadata.get("help", "")

        if dataclasses.is_dataclass(annotation) and isinstance(annotation, type):
            registry.sub(key, from_dataclass(annotation), short, help)
            continue

        kind = Kind(field.metadata.get("kind", Kind.SWITCH if annotation is bool else Kind.OPTIONAL))
        if kind is Kind.SWITCH:
            registry.switch(key, short, help)
        else:
            registry.define(key, short, help, field.metadata.get("param_help", ""), _default(field), kind)

    return registry


def _convert(key, value, annotation, /):
    converter = _boolean if annotation is bool else annotation
    if not callable(converter):
        raise ConversionError(
            "cannot convert %r for %r: %r is not a callable type" % (value, key, annotation),
            key=key,
            value=value,
            hint="annotate the field with a concrete type such as str, int or float"
        )
    try:
        return converter(value)
    except (TypeError, ValueError) as error:
        raise ConversionError(
            "cannot convert %r for %r to %s" % (value, key, getattr(annotation, "__name__", annotation)),
            key=key,
            value=value,
            hint=str(error) or "pass a value of the expected type"
        ) from error


def to_dataclass(instance, result, /):
    """
    Apply a parse Result to a dataclass instance (in place) and return it.

    Only flags given in the parse touch the instance.

    Raises
    - TypeError when instance is not a dataclass instance.
    - KeyNotFoundError when a field has no flag in the result's registry.
    - ConversionError when a value cannot be converted to the field type.
    """
    if isinstance(instance, type):
        raise TypeError("to_dataclass() needs a dataclass instance, not a class")
    _dataclass(instance)

    for field, annotation, key in _fields(type(instance)):
        if key not in result.registry:
            raise KeyNotFoundError(
                "no flag defined for field %r" % field.name,
                key=key,
                hint="derive the registry with from_dataclass() from the same dataclass"
            )
        if not result.parsed(key):
            continue
        flag = result.registry[key]

        if flag.kind is Kind.SUB:
            nested = getattr(instance, field.name)
            if nested is None:
                nested = annotation()
                setattr(instance, field.name, nested)
            to_dataclass(nested, result.child(key))
        elif flag.kind is Kind.SWITCH:
            setattr(instance, field.name, True)
        elif value := result.value(key):
            setattr(instance, field.name, _convert(key, value, annotation))

    return instance


def bind(cls_or_instance, tokens, /):
    """
    Derive a registry from a dataclass, parse `tokens` and apply the result.

    A class is instantiated with its defaults first; an instance is updated in place.

    Returns
    - (instance, result)
    """
    cls = _dataclass(cls_or_instance)
    instance = cls() if isinstance(cls_or_instance, type) else cls_or_instance
    result = from_dataclass(cls).parse(tokens)
    return to_dataclass(instance, result), result


__all__ = (
    "from_dataclass",
    "to_dataclass",
    "bind",
)
