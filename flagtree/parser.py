"""
flagtree parser: the token-by-token state machine and its front end.

phases (per scope)
- setup
  • tokens are trimmed; empty tokens are skipped (they are not boundaries).
  • every token keeps its 1-based position in the original input so that
    messages can say "at third position" even inside nested scopes.
- loop
  • each token is resolved by the matcher.
  • a token that names a flag is held as *pending* until the next token shows
    whether the flag receives a value (a token that names no flag) or not
    (another flag, or end of input).
  • a token that names no flag and follows nothing pending is held as pending
    too; the next token decides whether it was an unknown flag.
  • a sub flag dispatches at once: its cluster remainder ("-Svt" → "-v -t")
    and all following tokens are parsed by the sub's registry, and the outcome
    of that nested pass is the outcome of the whole pass.
- validation
  • no flag given in the scope → NoArgumentsError.
  • a required flag not given → RequiredFlagError (first in definition order).

consumption checks (every time a flag is given)
- given twice in one pass → DuplicateFlagError.
- exclusive and another exclusive flag already given → ExclusiveFlagError.

front end
- invoke(registry, prompt) accepts sys.argv, a shell-like string or a token
  iterable, and either raises faults or renders them (shell mode).
"""
import difflib
import shlex
import sys
from collections.abc import Iterable
from typing import NamedTuple

from .faults import *
from .flags import Kind
from .matcher import resolve_token
from .results import Result
from .utils import *


class _Pending(NamedTuple):
    index: int
    token: str
    match: object


class _Pass:
    """
    one parse pass over one registry scope.
    """

    def __init__(self, registry, tokens, path=(), /):
        self.registry = registry
        self.tokens = tokens
        self.path = path
        self.result = Result(registry, (token for _, token in tokens))

    @property
    def scope(self):
        return " ".join(map(repr, self.path)) or "root"

    def run(self):
        pending = None

        for position, (index, token) in enumerate(self.tokens):
            match = resolve_token(self.registry, token)

            if match is None:
                if pending is None:
                    pending = _Pending(index, token, None)
                else:
                    self._bind(pending, token)
                    pending = None
                continue

            if pending is not None:
                self._settle(pending)
                pending = None

            if match.cluster and match.flag.kind is not Kind.SUB:
                self._reject_cluster(index, token, match)

            if match.flag.kind is Kind.SUB:
                return self._dispatch(index, token, match, self.tokens[position + 1:])

            pending = _Pending(index, token, match)

        if pending is not None:
            self._settle(pending)

        return self._validate()

    def _unknown(self, pending, /):
        spellings = [spelling for flag in self.registry for spelling in flag.spellings]
        suggestions = difflib.get_close_matches(pending.token, spellings, 5)
        try:
            hint = "did you mean %r?" % suggestions[0]
        except IndexError:
            hint = "check the spelling; %s scope knows %s" % (self.scope, ", ".join(spellings) or "no flags")
        return KeyNotFoundError(
            "unknown flag %r at %s position" % (pending.token, ordinal(pending.index)),
            key=pending.token,
            token=pending.token,
            index=pending.index,
            scope=self.path,
            suggestions=suggestions,
            hint=hint
        )

    def _bind(self, pending, value, /):
        """
        `value` follows the pending token: bind it as the pending flag's value.
        """
        if pending.match is None:
            raise self._unknown(pending)
        flag = pending.match.flag
        if flag.kind is Kind.SWITCH:
            raise SwitchValueError(
                "switch %r at %s position cannot take the value %r" % (pending.token, ordinal(pending.index), value),
                key=flag.key,
                token=pending.token,
                index=pending.index,
                value=value,
                scope=self.path,
                hint="remove the value after %s" % pending.token
            )
        self._consume(flag.key, value, pending.index)

    def _settle(self, pending, /):
        """
        the pending token was followed by another flag or by the end of input.
        """
        if pending.match is None:
            raise self._unknown(pending)
        flag = pending.match.flag
        if flag.kind is Kind.REQUIRED:
            raise ValueRequiredError(
                "flag %r at %s position requires a value" % (pending.token, ordinal(pending.index)),
                key=flag.key,
                token=pending.token,
                index=pending.index,
                scope=self.path,
                hint="pass a value after it (for example: %s <%s>)" % (pending.token, flag.param_help or "value")
            )
        self._consume(flag.key, "", pending.index)

    def _reject_cluster(self, index, token, match, /):
        """
        only sub flags carry the rest of a cluster; anything else is an error.
        """
        flag = match.flag
        if flag.kind is Kind.SWITCH and not match.routed:
            raise SwitchValueError(
                "switch %r cannot be combined with %r in %r at %s position" % (
                    flag.key, match.cluster, token, ordinal(index)
                ),
                key=flag.key,
                token=token,
                index=index,
                value=match.cluster,
                scope=self.path,
                hint="split the cluster into separate flags"
            )
        raise NotASubError(
            "%r in %r at %s position is not a sub flag and cannot carry %r" % (
                flag.key, token, ordinal(index), match.cluster
            ),
            key=flag.key,
            token=token,
            index=index,
            scope=self.path,
            hint="start the cluster with a sub flag, or split it into separate flags"
        )

    def _consume(self, key, value, index, /):
        if (flag := self.registry.get(key)) is None:
            raise KeyNotFoundError(
                "key %r not found" % key,
                key=key,
                index=index,
                scope=self.path,
                hint="check the spelling of the flag"
            )
        state = self.result.state(key)
        if state.parsed:
            raise DuplicateFlagError(
                "flag %r given again at %s position" % (key, ordinal(index)),
                key=key,
                index=index,
                scope=self.path,
                hint="give every flag at most once"
            )
        if self.registry.is_exclusive(key):
            for other in self.registry:
                if other is not flag and self.registry.is_exclusive(other.key) and self.result.parsed(other.key):
                    raise ExclusiveFlagError(
                        "flag %r at %s position is exclusive to %r" % (key, ordinal(index), other.key),
                        key=key,
                        other=other.key,
                        index=index,
                        scope=self.path,
                        hint="keep only one of %s" % ", ".join(map(repr, sorted(self.registry.exclusive)))
                    )
        state.parsed = True
        if value:
            state.value = value
            state.has_value = True

    def _dispatch(self, index, token, match, rest, /):
        """
        hand the cluster remainder and every following token to the sub's registry.
        """
        flag = match.flag
        if not match.cluster and not rest:
            raise EmptySubError(
                "sub flag %r at %s position was given nothing to parse" % (token, ordinal(index)),
                key=flag.key,
                token=token,
                index=index,
                scope=self.path,
                hint="add flags of %r after it" % flag.key
            )
        self._consume(flag.key, "", index)

        forwarded = [(index, "-" + char) for char in match.cluster] + list(rest)
        child = _Pass(flag.child, forwarded, self.path + (flag.key,)).run()

        self.result._children[flag.key] = child
        self.result._succeeded = True
        return self.result

    def _validate(self):
        if not any(self.result.parsed(flag.key) for flag in self.registry):
            raise NoArgumentsError(
                "no flags given to %s scope" % self.scope,
                scope=self.path,
                hint="give at least one flag"
            )
        for flag in self.registry:
            if flag.kind is Kind.REQUIRED and not self.result.parsed(flag.key):
                raise RequiredFlagError(
                    "required flag %r not given to %s scope" % (flag.key, self.scope),
                    key=flag.key,
                    scope=self.path,
                    hint="add %s" % " or ".join(flag.spellings)
                )
        self.result._succeeded = True
        return self.result


def _tokenize(tokens, /):
    if isinstance(tokens, str) or not isinstance(tokens, Iterable):
        raise TypeError("parse() argument must be an iterable of strings")
    positioned = []
    for index, token in enumerate(tokens, 1):
        if not isinstance(token, str):
            raise TypeError("parse() argument must be an iterable of strings")
        if token := token.strip():
            positioned.append((index, token))
    return positioned


def parse(registry, tokens, /):
    """
    parse `tokens` against `registry` and return a fresh Result.

    parameters
    - registry: the root Registry.
    - tokens: iterable of str, already split (no shell splitting happens here).

    returns
    - the root scope's Result; nested scopes hang off it via Result.child().

    raises
    - one of the flagtree faults (KeyNotFoundError, ValueRequiredError, ...)
      on the first problem found; nothing is recovered internally.
    - TypeError when tokens is not an iterable of strings.
    """
    return _Pass(registry, _tokenize(tokens)).run()


def invoke(registry, prompt=Unset, /, *, shell=False, fancy=False, colorful=True, prog=Unset):
    """
    Parse a command line against a registry.

    Parameters
    - prompt:
      • Unset: read tokens from sys.argv[1:].
      • str: shell-like string; will be split via shlex.split.
      • Iterable[str]: pre-tokenized sequence.
    - shell: when True, faults are rendered to stderr and the process exits
      with status 1; otherwise they are raised.
    - fancy / colorful / prog: rendering options for shell mode.

    Returns
    - the Result of the parse.
    """
    if prompt is Unset:
        tokens = sys.argv[1:]
    elif isinstance(prompt, str):
        tokens = shlex.split(prompt)
    elif isinstance(prompt, Iterable):
        tokens = list(prompt)
    else:
        raise TypeError("invoke() prompt must be a string or an iterable of strings")

    try:
        return parse(registry, tokens)
    except FlagException as fault:
        if not shell:
            raise
        trigger(fault, shell=True, fancy=fancy, colorful=colorful, prog=prog)


__all__ = (
    "parse",
    "invoke",
)
