r"""
flagtree flag definitions and registries.

Overview
- Kind: the four flag kinds (optional, required, switch, sub).
- Flag: one declared flag in one registry scope. Immutable once defined; it
  never carries parse state (see flagtree.results for that).
- Registry: an ordered set of flags for one scope (root or nested), with a
  short-key index and a registry-scoped exclusive set.

Definition rules (enforced on every define call)
- key: non-empty string without whitespace; unique within the registry.
- short: "" (none) or exactly one non-dash, non-space character; unique within
  the registry when non-empty.
- sub flags adopt a previously built child registry by exclusive ownership:
  a registry can be the child of one sub flag only, and never of itself or of
  one of its own descendants (the scopes always form a tree).
- failed definitions leave the registry exactly as it was.

Exclusivity
- set_exclusive(*keys) replaces the exclusive set of the registry. All keys are
  validated before anything changes, so a failing call keeps the previous set.

Quick example:
    >>> sync = Registry()
    >>> target = sync.required("target", "t", param_help="name")
    >>> verbose = sync.switch("verbose", "v")
    >>> root = Registry()
    >>> flag = root.sub("sync", sync, "S", help="package sync")
    >>> root.parse(["-Svt", "world"]).tree()
    {'sync': {'target': 'world', 'verbose': None}}
"""
import re
from enum import IntEnum

from .faults import (
    InvalidKeyError,
    DuplicateKeyError,
    DuplicateShortKeyError,
    KeyNotFoundError,
    IgnoredDefaultWarning,
    trigger,
)
from .utils import *


class Kind(IntEnum):
    """
    flag kinds.

    - OPTIONAL: may be given; takes an optional value (falls back to the default).
    - REQUIRED: must be given, and must be given a value.
    - SWITCH: may be given; never takes a value.
    - SUB: hands every following token to a nested registry.
    """
    OPTIONAL = 0
    REQUIRED = 1
    SWITCH = 2
    SUB = 3

    def __str__(self):
        return self.name.lower()


class FlagType(type):
    """
    Metaclass that exposes the fields named in __introspectable__ as read-only
    properties (via mirror) and provides stable __repr__/__rich_repr__.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__name__.lower()}({', '.join('%s=%r' % pair for pair in self.__rich_repr__())})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


class Flag(metaclass=FlagType):
    """
    One declared flag.

    Flags are built by Registry.define()/sub() and are immutable afterwards;
    all fields are exposed as read-only properties.

    Fields
    - key: canonical long-form identifier ("--key").
    - short: one-character alias ("-k") or "" when there is none.
    - help / param_help: help text for the flag and for its value.
    - default: value reported when the flag was not given a value.
    - kind: a Kind.
    - child: the owned nested Registry for Kind.SUB, None otherwise.
    """
    __introspectable__ = (
        "key",
        "short",
        "help",
        "param_help",
        "default",
        "kind",
        "child",
    )
    __slots__ = tuple("_" + name for name in __introspectable__)

    def __init__(self, key, short, help, param_help, default, kind, child=None, /):
        self._key = key
        self._short = short
        self._help = help
        self._param_help = param_help
        self._default = default
        self._kind = kind
        self._child = child

    @property
    def spellings(self):
        """
        every token spelling that names this flag on its own ("--key", "-k").
        """
        return ("--" + self.key,) + (("-" + self.short,) if self.short else ())


def _sanitize_text(name, value, /):
    if not isinstance(value, str):
        raise TypeError(f"flag {name!r} must be a string")
    return value


def _sanitize_key(key, /):
    """
    validate a flag key; InvalidKeyError when empty or containing whitespace.
    """
    if not isinstance(key, str):
        raise TypeError("flag 'key' must be a string")
    if not key or re.search(r"\s", key):
        raise InvalidKeyError(
            "invalid key %r: keys must be non-empty and contain no whitespace" % key,
            key=key,
            hint="use a non-empty key without spaces (for example: 'config')"
        )
    return key


def _sanitize_short(key, short, /):
    """
    validate a short key; InvalidKeyError unless it is "" or one usable character.
    """
    if not isinstance(short, str):
        raise TypeError("flag 'short' must be a string")
    if short and (len(short) != 1 or short == "-" or short.isspace()):
        raise InvalidKeyError(
            "invalid short key %r for %r: short keys are a single character" % (short, key),
            key=key,
            short=short,
            hint="use one letter or digit as short key (for example: 'c')"
        )
    return short


class Registry:
    """
    Ordered set of flag definitions for one scope.

    Lookups
    - get(key) / short(short) return the Flag or None.
    - registry[key] returns the Flag or raises KeyNotFoundError.
    - `key in registry` tests keys; iterating yields Flags in definition order.

    Parsing
    - parse(tokens) returns a fresh flagtree.results.Result; the registry is
      never mutated by parsing, so one registry serves any number of parses.
    """

    flags = mirror("flags")
    exclusive = mirror("exclusive")

    def __init__(self):
        self._flags = {}
        self._shorts = {}
        self._exclusive = frozenset()
        self._adopted = False

    def _check(self, key, short, /):
        key = _sanitize_key(key)
        short = _sanitize_short(key, short)
        if key in self._flags:
            raise DuplicateKeyError(
                "duplicate key %r" % key,
                key=key,
                hint="every key must be unique within its registry"
            )
        if short and short in self._shorts:
            raise DuplicateShortKeyError(
                "duplicate short key %r (already bound to %r)" % (short, self._shorts[short]),
                key=key,
                short=short,
                other=self._shorts[short],
                hint="pick another short key or leave it empty"
            )
        return key, short

    def _store(self, flag, /):
        self._flags[flag.key] = flag
        if flag.short:
            self._shorts[flag.short] = flag.key
        return flag

    def define(self, key, /, short="", help="", param_help="", default="", kind=Kind.OPTIONAL):
        """
        Define a value-bearing or switch flag.

        Parameters
        - key: str, unique non-empty key.
        - short: str, "" or a single character, unique when given.
        - help / param_help: str, help texts.
        - default: str, reported by Result.value() when no value was bound.
        - kind: Kind.OPTIONAL, Kind.REQUIRED or Kind.SWITCH (use sub() for Kind.SUB).

        Raises
        - InvalidKeyError, DuplicateKeyError, DuplicateShortKeyError.
        - TypeError for non-string fields or kind=Kind.SUB.

        Returns
        - the new Flag.
        """
        kind = Kind(kind)
        if kind is Kind.SUB:
            raise TypeError("sub flags must be defined with sub() and a child registry")
        key, short = self._check(key, short)
        help = _sanitize_text("help", help)
        param_help = _sanitize_text("param_help", param_help)
        default = _sanitize_text("default", default)

        flag = self._store(Flag(key, short, help, param_help, default, kind))

        if kind is Kind.SWITCH and default:
            trigger(IgnoredDefaultWarning(
                "default %r of switch %r is never used" % (default, key),
                key=key,
                hint="switches take no value; drop the default",
                stacklevel=2
            ))
        return flag

    def optional(self, key, /, short="", help="", param_help="", default=""):
        """Define an optional flag that takes an optional value."""
        return self.define(key, short, help, param_help, default, Kind.OPTIONAL)

    def required(self, key, /, short="", help="", param_help="", default=""):
        """Define a required flag that must be given a value."""
        return self.define(key, short, help, param_help, default, Kind.REQUIRED)

    def switch(self, key, /, short="", help=""):
        """Define an optional switch that takes no value."""
        return self.define(key, short, help, "", "", Kind.SWITCH)

    def sub(self, key, child, /, short="", help=""):
        """
        Define a sub flag that hands the remaining tokens to `child`.

        The child registry must be fully usable on its own and is adopted by
        this flag: it cannot be adopted again, and adopting this registry or
        one of its ancestors is rejected.

        Raises
        - InvalidKeyError, DuplicateKeyError, DuplicateShortKeyError.
        - TypeError when child is not a Registry.
        - ValueError when child is already owned or would close a cycle.
        """
        if not isinstance(child, Registry):
            raise TypeError("sub() child must be a registry")
        if child._adopted:
            raise ValueError("registry is already owned by another sub flag")
        if child is self or any(scope is self for scope in child.scopes()):
            raise ValueError("registry cannot adopt itself or one of its ancestors")
        key, short = self._check(key, short)
        help = _sanitize_text("help", help)

        flag = self._store(Flag(key, short, help, "", "", Kind.SUB, child))
        child._adopted = True
        return flag

    def set_exclusive(self, *keys):
        """
        Replace the exclusive set of this registry with `keys`.

        At most one flag of the exclusive set may be parsed per pass. Calling
        with no keys clears exclusivity. Unknown keys raise KeyNotFoundError
        and leave the previous set untouched.
        """
        for key in keys:
            if key not in self._flags:
                raise KeyNotFoundError(
                    "cannot make unknown key %r exclusive" % key,
                    key=key,
                    hint="define the flag before adding it to the exclusive set"
                )
        self._exclusive = frozenset(keys)

    def is_exclusive(self, key, /):
        return key in self._exclusive

    def get(self, key, /):
        return self._flags.get(key)

    def short(self, short, /):
        return self._flags.get(self._shorts.get(short))

    def scopes(self):
        """
        yield every registry nested below this one (depth first).
        """
        for flag in self._flags.values():
            if flag.child is not None:
                yield flag.child
                yield from flag.child.scopes()

    def parse(self, tokens, /):
        """
        Parse `tokens` against this registry; see flagtree.parser.parse.
        """
        from .parser import parse

        return parse(self, tokens)

    def __getitem__(self, key, /):
        try:
            return self._flags[key]
        except KeyError:
            raise KeyNotFoundError(
                "key %r not found" % key,
                key=key,
                hint="known keys: %s" % (", ".join(map(repr, self._flags)) or "none")
            ) from None

    def __contains__(self, key, /):
        return key in self._flags

    def __iter__(self):
        return iter(self._flags.values())

    def __len__(self):
        return len(self._flags)

    def __repr__(self):
        return f"registry({', '.join(self._flags)})"

    def __rich_repr__(self):
        yield "flags", list(self._flags.values())
        if self._exclusive:
            yield "exclusive", sorted(self._exclusive)


__all__ = (
    "Kind",
    "Flag",
    "Registry",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del FlagType
