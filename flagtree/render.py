"""
flagtree rendering (help tables and result trees) with rich.

Overview
- helptable(registry): a rich Table listing every flag with its short key,
  key (and param help), kind and help text; sub registries are listed below
  their sub flag, indented one level per scope.
- resulttree(result): a rich Tree of everything given in a parse.
- to_text(renderable): render any of the above to a plain string.

Customization
- Define a mapping named __styles__ in __main__ to override any palette entry.
- When colorful is False, styling is suppressed.
"""
import io
from collections import defaultdict

from rich.box import ROUNDED
from rich.console import Console
from rich.table import Table
from rich.text import Text
from rich.tree import Tree


def _palette(colorful, /):
    if not colorful:
        return defaultdict(str)
    return defaultdict(str, {
        # === Table chrome ===
        "table-border": "#4B5563",  # Slate border
        "header": "bold #FFFFFF",  # Pure white headers

        # === Names ===
        "short-name": "bold #22C55E",  # GREEN for short keys
        "key-name": "bold #00E6FF",  # CYAN for keys
        "sub-name": "bold #36C5F0",  # SKY-BLUE for sub flags
        "param": "bold #FFD600",  # AMBER for parameters

        # === Kinds ===
        "kind-optional": "#9CA3AF",
        "kind-required": "bold #FF4D94",  # MAGENTA → required stands out
        "kind-switch": "#22C55E",
        "kind-sub": "#36C5F0",

        # === Help / values ===
        "help": "#9CA3AF",  # Muted gray
        "value": "#E5E7EB",
        "unset": "dim #9CA3AF",
        "root": "bold #FF4D94",
    } | getattr(__import__("__main__"), "__styles__", {}))


def helptable(registry, /, *, colorful=True, title=None):
    """
    Build a help table for `registry` and all its nested registries.

    Columns
    - Short: "-x" or empty.
    - Key: "--key", followed by "<param help>" when the flag has one.
    - Kind: optional, required, switch or sub.
    - Help: the flag help text.
    """
    styles = _palette(colorful)
    table = Table(
        title=title,
        box=ROUNDED,
        border_style=styles["table-border"],
        header_style=styles["header"],
    )
    for header in ("Short", "Key", "Kind", "Help"):
        table.add_column(header)

    def rows(registry, depth):
        indent = "  " * depth
        for flag in registry:
            key = Text.assemble(indent, ("--" + flag.key, styles["key-name" if flag.child is None else "sub-name"]))
            if flag.param_help:
                key.append(" <%s>" % flag.param_help, styles["param"])
            table.add_row(
                Text.assemble(indent, ("-" + flag.short, styles["short-name"])) if flag.short else "",
                key,
                Text(str(flag.kind), styles["kind-" + str(flag.kind)]),
                Text(flag.help, styles["help"]),
            )
            if flag.child is not None:
                rows(flag.child, depth + 1)

    rows(registry, 0)
    return table


def resulttree(result, /, *, colorful=True, label="flags"):
    """
    Build a tree of the flags given in `result` (see Result.tree()).

    Flags given without a value are shown as "(unset)", followed by their
    default when they have one.
    """
    styles = _palette(colorful)
    tree = Tree(Text(label, styles["root"]))

    def grow(branch, result):
        for flag in result.registry:
            if not result.parsed(flag.key):
                continue
            if (child := result.child(flag.key)) is not None:
                grow(branch.add(Text("--" + flag.key, styles["sub-name"])), child)
                continue
            state = result.state(flag.key)
            leaf = Text.assemble(("--" + flag.key, styles["key-name"]), " = ")
            if state.has_value:
                leaf.append(state.value, styles["value"])
            else:
                leaf.append("(unset)", styles["unset"])
                if flag.default:
                    leaf.append(" default %r" % flag.default, styles["help"])
            branch.add(leaf)

    grow(tree, result)
    return tree


def to_text(renderable, /, *, width=80):
    """
    Render a rich renderable to a plain string (no color, no terminal needed).
    """
    console = Console(width=width, color_system=None, force_terminal=False, record=True, file=io.StringIO())
    console.print(renderable)
    return console.export_text()


__all__ = (
    "helptable",
    "resulttree",
    "to_text",
)
