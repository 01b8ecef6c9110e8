"""
flagtree faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
  Codes are grouped by domain (definition, resolution, consumption, validation,
  adapter, warnings) so that searches in logs stay predictable.
- FlagException / FlagWarning: base types that carry a message plus read-only
  options and know how to render themselves with rich.
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).

The taxonomy is closed: every parse or definition failure is exactly one of the
classes below, and callers tell them apart by class (or by options["code"]).
Options always carry `code`, `title` and `hint`; most also carry `key`.

Integration
- Registry definition calls and the parser raise these exceptions directly.
- invoke(..., shell=True) renders them through trigger() and exits with status 1.
- Host applications may define __styles__, __codes__ and __prog__ in __main__ to
  restyle, relabel and rename the rendered output.
"""
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the package (stable identifiers).

    grouping (by high-level domain)
    - definition (2110x)
      • INVALID_KEY, DUPLICATE_KEY, DUPLICATE_SHORT_KEY
    - resolution (2111x)
      • KEY_NOT_FOUND, NOT_A_SUB, EMPTY_SUB
    - consumption (2112x)
      • DUPLICATE_FLAG, EXCLUSIVE_FLAG, VALUE_REQUIRED, SWITCH_VALUE
    - validation (2113x)
      • REQUIRED_FLAG, NO_ARGUMENTS
    - adapter (2114x)
      • CONVERSION
    - warnings (22xxx)
      • IGNORED_DEFAULT

    spacing leaves room for future additions without reshuffling existing codes.
    """
    # --- definition errors (21xxx) ---
    INVALID_KEY             = 21101
    DUPLICATE_KEY           = 21102
    DUPLICATE_SHORT_KEY     = 21103

    # --- resolution errors (21xxx) ---
    KEY_NOT_FOUND           = 21111
    NOT_A_SUB               = 21112
    EMPTY_SUB               = 21113

    # --- consumption errors (21xxx) ---
    DUPLICATE_FLAG          = 21121
    EXCLUSIVE_FLAG          = 21122
    VALUE_REQUIRED          = 21123
    SWITCH_VALUE            = 21124

    # --- validation errors (21xxx) ---
    REQUIRED_FLAG           = 21131
    NO_ARGUMENTS            = 21132

    # --- adapter errors (21xxx) ---
    CONVERSION              = 21141

    # --- warnings (22xxx) ---
    IGNORED_DEFAULT         = 22101

    def normalize(self):
        """
        label of this code as shown in rendered faults.

        a __codes__ mapping in __main__ may relabel codes (FaultCode -> str);
        unmapped codes render as their number.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _palette(defaults, /):
    return defaultdict(str, defaults | getattr(__import__("__main__"), "__styles__", {}))


def _render(fault, styles, title, /):
    """
    shared rich layout for errors and warnings: "[ prog — code | title ]", message, hint.
    """
    colorful = fault.options.get("colorful", True)

    def text(fragment, style):
        if not fragment:
            return Text("")
        return Text(str(fragment), styles[style] if colorful else "")

    prog = coalesce(fault.options.get("prog", Unset), getattr(__import__("__main__"), "__prog__", "flagtree"))
    header = Text.assemble(
        "[ ",
        text(prog, "prog-name"),
        " — ",
        text(fault.code.normalize(), "code"),
        " | ",
        text(fault.options.get("title", "").title(), title),
        " ]"
    )
    message = text(fault.message, "message")
    hint = Text.assemble(text(" → ", "hint-arrow"), text(fault.options.get("hint"), "hint"))

    if fault.options.get("fancy", False):
        return Panel(Group(message, hint), title=header, title_align="left")
    return Group(header, message, hint)


class _Fault:
    """
    state shared by errors and warnings.

    attributes
    - message: str, the one-sentence description.
    - options: read-only mapping of context (code, title, hint, key, ...).
    - code: the FaultCode (also available as options["code"]).
    """
    __faultcode__ = Unset
    __title__ = "flag fault"

    def __init__(self, message, /, **options):
        if not isinstance(message, str):
            raise TypeError("fault message must be a string")
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType({"code": self.__faultcode__, "title": self.__title__} | options)

    @property
    def code(self):
        return self.options["code"]

    def __replace__(self, **overrides):
        return type(self)(self.message, **(dict(self.options) | overrides))


class FlagException(_Fault, Exception):
    """
    base class of every flagtree error.
    """
    __title__ = "flag error"

    def __rich__(self):
        return _render(self, _palette({
            "prog-name": "bold #E6E6F0",  # program name
            "code": "bold #00E5FF",  # cyan code
            "error-title": "bold #FF4DA6",  # pink title
            "message": "#C8C8D0",
            "hint-arrow": "dim #9CE19C",
            "hint": "italic #9CE19C",  # green hint
        }), "error-title")

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)


class InvalidKeyError(FlagException):
    __faultcode__ = FaultCode.INVALID_KEY
    __title__ = "invalid key"


class DuplicateKeyError(FlagException):
    __faultcode__ = FaultCode.DUPLICATE_KEY
    __title__ = "duplicate key"


class DuplicateShortKeyError(FlagException):
    __faultcode__ = FaultCode.DUPLICATE_SHORT_KEY
    __title__ = "duplicate short key"


class KeyNotFoundError(FlagException):
    __faultcode__ = FaultCode.KEY_NOT_FOUND
    __title__ = "unknown flag"


class NotASubError(FlagException):
    __faultcode__ = FaultCode.NOT_A_SUB
    __title__ = "not a sub flag"


class EmptySubError(FlagException):
    __faultcode__ = FaultCode.EMPTY_SUB
    __title__ = "sub flag without arguments"


class DuplicateFlagError(FlagException):
    __faultcode__ = FaultCode.DUPLICATE_FLAG
    __title__ = "duplicated flag"


class ExclusiveFlagError(FlagException):
    __faultcode__ = FaultCode.EXCLUSIVE_FLAG
    __title__ = "exclusive flags"


class ValueRequiredError(FlagException):
    __faultcode__ = FaultCode.VALUE_REQUIRED
    __title__ = "value required"


class SwitchValueError(FlagException):
    __faultcode__ = FaultCode.SWITCH_VALUE
    __title__ = "switch cannot take a value"


class RequiredFlagError(FlagException):
    __faultcode__ = FaultCode.REQUIRED_FLAG
    __title__ = "missing required flag"


class NoArgumentsError(FlagException):
    __faultcode__ = FaultCode.NO_ARGUMENTS
    __title__ = "no arguments"


class ConversionError(FlagException):
    __faultcode__ = FaultCode.CONVERSION
    __title__ = "bad flag value"


class FlagWarning(_Fault, Warning):
    """
    base class of every flagtree warning.
    """
    __title__ = "flag warning"

    def __rich__(self):
        return _render(self, _palette({
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",  # amber code
            "warning-title": "bold #FFC2E0",
            "message": "#D6D6DE",
            "hint-arrow": "dim #B8EFAF",
            "hint": "italic #B8EFAF",
        }), "warning-title")

    def __trigger__(self):
        if not self.options.get("shell", False):
            # +2 skips __trigger__ and trigger() so the warning points at the caller
            return warnings.warn(self, stacklevel=self.options.get("stacklevel", 1) + 2)
        console.print(self)


class IgnoredDefaultWarning(FlagWarning):
    __faultcode__ = FaultCode.IGNORED_DEFAULT
    __title__ = "ignored default"


def trigger(fault, /, **options):
    """
    surface a fault with extra runtime options merged in.

    - errors are raised, warnings go through warnings.warn.
    - with shell=True both are printed to stderr with rich, and errors exit
      the process with status 1.

    options commonly passed: shell, fancy, colorful, prog, stacklevel, plus any
    context worth showing (key, token, index, suggestions, ...).
    """
    if not isinstance(fault, FlagException | FlagWarning):
        raise TypeError("trigger() argument must be a flagtree fault, not %r" % type(fault).__name__)
    fault.__replace__(**options).__trigger__()


__all__ = (
    "FaultCode",
    "FlagException",
    "InvalidKeyError",
    "DuplicateKeyError",
    "DuplicateShortKeyError",
    "KeyNotFoundError",
    "NotASubError",
    "EmptySubError",
    "DuplicateFlagError",
    "ExclusiveFlagError",
    "ValueRequiredError",
    "SwitchValueError",
    "RequiredFlagError",
    "NoArgumentsError",
    "ConversionError",
    "FlagWarning",
    "IgnoredDefaultWarning",
    "trigger",
)
