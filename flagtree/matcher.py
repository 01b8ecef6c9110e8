"""
flagtree token matcher.

Pure functions over (registry, text); nothing here keeps state between calls,
so the matcher can be exercised in isolation from the parser.

Token shapes
- "-x"       short key x, or the start of a cluster "-xyz"
- "--name"   long key name
- anything else is not a flag token (a value, or an unknown word)

Clusters
- a cluster packs several short keys in one token ("-vt").
- a sub key inside a cluster "carries" the rest of the cluster into its child
  registry ("-Svt" is "-S" followed by "-v -t" inside S's registry), so a
  cluster is matched scope by scope, recursing at every sub key.
"""
from typing import NamedTuple

from .flags import Kind


class Match(NamedTuple):
    """
    a token resolved against a registry.

    - flag: the Flag named by the token.
    - cluster: the characters after the first short key when the token is a
      cluster, "" otherwise.
    - span: how many characters of the token body belong to this registry's scope;
      a span shorter than the body means the cluster routes through a sub key.
    """
    flag: object
    cluster: str = ""
    span: int = 0

    @property
    def routed(self):
        return 0 < self.span <= len(self.cluster)


def match_cluster(registry, chars, /):
    """
    match `chars` as a cluster of short keys.

    walk
    - unknown short key: the cluster does not match.
    - non-sub flag: continue with the next character.
    - sub flag: the cluster matches only if characters follow it and those
      characters are themselves a cluster of the sub's child registry.
    - every character matched without meeting a sub flag: the cluster matches.

    returns
    - the number of leading characters matched within this registry's scope
      (up to and including a sub key), or None when the cluster does not match.
    """
    if not chars:
        return None
    for index, char in enumerate(chars):
        flag = registry.short(char)
        if flag is None:
            return None
        if flag.kind is not Kind.SUB:
            continue
        if index == len(chars) - 1:
            return None
        if match_cluster(flag.child, chars[index + 1:]) is None:
            return None
        return index + 1
    return len(chars)


def resolve_token(registry, token, /):
    """
    resolve a single raw token to a Match, or None when it names no flag.

    order of attempts (only for tokens starting with "-")
    1. strip one dash; if the body is a cluster, the first character is the flag.
    2. otherwise the whole body as a short key.
    3. otherwise, for "--name", name as a long key.
    """
    if not token.startswith("-"):
        return None
    body = token[1:]

    if (span := match_cluster(registry, body)) is not None:
        return Match(registry.short(body[0]), body[1:], span)

    if (flag := registry.short(body)) is not None:
        return Match(flag)

    if body.startswith("-") and (flag := registry.get(body[1:])) is not None:
        return Match(flag)

    return None


__all__ = (
    "Match",
    "match_cluster",
    "resolve_token",
)
