"""
flagtree parse results.

Every call to Registry.parse() allocates a fresh Result tree; definitions are
never touched by parsing. One Result exists per scope that the parse entered:
the root scope, plus one child Result for each sub flag that fired.

Accessors
- value(key): bound value, else the flag default, else "" for unknown keys.
- parsed(): whether this scope's pass succeeded.
- parsed(*keys): whether every named flag was given (False for unknown keys).
- tree(): nested dict of everything that was given (see Result.tree).
- state(key) / child(key): low-level access to per-flag state and child scopes.
"""
from .utils import *


class FlagState:
    """
    parse state of one flag within one pass.

    - parsed: the flag was given.
    - has_value: the flag was given an explicit, non-empty value.
    - value: that value ("" otherwise).
    """
    __slots__ = ("parsed", "has_value", "value")

    def __init__(self, parsed=False, has_value=False, value=""):
        self.parsed = parsed
        self.has_value = has_value
        self.value = value

    def __eq__(self, other, /):
        if not isinstance(other, FlagState):
            return NotImplemented
        return (self.parsed, self.has_value, self.value) == (other.parsed, other.has_value, other.value)

    __hash__ = None

    def __repr__(self):
        return "flag-state(parsed=%r, has_value=%r, value=%r)" % (self.parsed, self.has_value, self.value)


class Result:
    """
    parsed state of one registry scope.

    Instances are built by the parser; callers only read them.
    """

    registry = mirror("registry")
    tokens = mirror("tokens")
    children = mirror("children")

    def __init__(self, registry, tokens=(), /):
        self._registry = registry
        self._tokens = tuple(tokens)
        self._states = {flag.key: FlagState() for flag in registry}
        self._children = {}
        self._succeeded = False

    def state(self, key, /):
        return self._states.get(key)

    def child(self, key, /):
        return self._children.get(key)

    def value(self, key, /):
        """
        the value bound to `key` in this pass.

        falls back to the flag's declared default when the flag was not given
        or was given without a value; "" when the key is unknown.
        """
        if (flag := self._registry.get(key)) is None:
            return ""
        state = self._states[key]
        if state.parsed and state.has_value:
            return state.value
        return flag.default

    def parsed(self, *keys):
        """
        with no keys: whether this scope's pass succeeded.
        with keys: whether every named flag was given in this pass.
        """
        if not keys:
            return self._succeeded
        return all(key in self._states and self._states[key].parsed for key in keys)

    def tree(self):
        """
        nested mapping of every flag given in this pass, in definition order.

        - flag given with a value    → key: value
        - flag given without a value → key: None
        - sub flag that fired        → key: the child scope's tree
        """
        tree = {}
        for key, state in self._states.items():
            if not state.parsed:
                continue
            if (child := self._children.get(key)) is not None:
                tree[key] = child.tree()
            else:
                tree[key] = state.value if state.has_value else None
        return tree

    def __bool__(self):
        return self._succeeded

    def __repr__(self):
        return f"result({self.tree()!r})"

    def __rich_repr__(self):
        yield "parsed", self._succeeded
        yield "tree", self.tree()


__all__ = (
    "FlagState",
    "Result",
)
