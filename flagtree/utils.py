"""
flagtree utilities shared by the registry, parser and fault layers.

Overview
- Unset: sentinel for "argument not passed" where None and "" are meaningful.
- coalesce(value, default): resolve Unset to a default.
- rename("name"): decorator giving generated functions a stable name.
- mirror("attr"): read-only property over self._attr; containers come back as
  immutable views (tuple, mappingproxy, frozenset).
- ordinal(position): "first", "second", ..., "11th", "22nd" for messages.

Only names in __all__ are meant for use outside the package.

Quick examples
    >>> coalesce(Unset, "flagtree")
    'flagtree'
    >>> coalesce("", "flagtree")
    ''
    >>> ordinal(12)
    '12th'
"""
import functools
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Type of the Unset sentinel; every instantiation returns the same object.

    Unset is falsy, prints as "Unset", and survives copy and pickle as itself.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __reduce__(self):
        return "Unset"


def coalesce(object, default=None, /):
    """
    `default` when object is Unset, object itself otherwise (None, 0 and "" included).
    """
    return default if object is Unset else object


def rename(name, /):
    """
    Decorator setting __name__ and __qualname__ of the decorated function to `name`.
    """
    if not isinstance(name, str):
        raise TypeError("rename() argument must be a string")

    def decorator(function):
        function.__name__ = function.__qualname__ = name
        return function

    return decorator


def _frozen(value):
    match value:
        case str():
            return value
        case Sequence():
            return tuple(value)
        case Mapping():
            return MappingProxyType(value)
        case Set():
            return frozenset(value)
    return value


def mirror(name, /):
    """
    Property returning self._<name>, frozen when it is a container.

    Example
    - with self._flags set in __init__, `flags = mirror("flags")` exposes it read-only.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _frozen(getattr(self, "_" + name))

    return property(getter)


_WORDS = ("first", "second", "third", "fourth", "fifth", "sixth", "seventh", "eighth", "ninth", "tenth")


@functools.cache
def ordinal(number, /):
    """
    Ordinal label for a 1-based token position: words up to ten, "11th", "21st", ... after.
    """
    if 1 <= number <= len(_WORDS):
        return _WORDS[number - 1]
    if 10 < number % 100 < 20:
        return "%dth" % number
    return "%d%s" % (number, {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th"))


Unset = UnsetType()


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "ordinal",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
