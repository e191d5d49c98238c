"""
Bosun faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every fault the engine
  can surface. Codes are grouped by domain so logs and searches stay predictable.
- CommandException: base type that carries message + options and knows how to
  render itself with rich in a short, lowercased, actionable way.
- trigger(): central entry point to surface a fault with extra context.
- getdoc(): optional description lookup for a code from the host application.

Taxonomy
- RegistrationError → DuplicateNameError
  fatal at startup, aborts that registration and leaves the tree unchanged.
- BindingError → MissingArgumentError, InvalidArgumentError, UnknownTypeError
  surfaced to the sender as a usage message; the executor never runs.
- PermissionDeniedError
  surfaced to the sender as the fixed denial message.
- HandlerError
  wraps anything raised inside an executor; only ever handed to the reporter.
- RejectedTaskError
  the worker pool refused an asynchronous invocation.

Integration
- Library code raises faults through trigger(fault, **context).
- Reporters and hosts may print a fault directly: console.print(fault).
"""
import copy
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)

# overridable per role through __main__.__styles__
PALETTE = {
    "prog-name": "bold #E6E6F0",
    "code": "bold #00E5FF",
    "error-title": "bold #FF4DA6",
    "error-message": "#C8C8D0",
    "hint-arrow": "dim #9CE19C",
    "hint": "italic #9CE19C",
}


class FaultCode(IntEnum):
    """
    canonical fault codes used across the engine (stable identifiers).

    grouping (by high-level domain)
    - registration (211xx)
      • DUPLICATE_NAME, INVALID_REGISTRATION, FROZEN_NODE
    - binding (212xx)
      • MISSING_ARGUMENT, INVALID_ARGUMENT, UNKNOWN_TYPE
    - permission (213xx)
      • PERMISSION_DENIED
    - execution (214xx)
      • HANDLER_ERROR, COMPLETER_ERROR
    - workers (215xx)
      • TASK_REJECTED

    normalize() allows host remapping to custom labels while keeping the
    numeric codes stable.
    """
    # --- registration errors (211xx) ---
    DUPLICATE_NAME              = 21101
    INVALID_REGISTRATION        = 21102
    FROZEN_NODE                 = 21103

    # --- binding errors (212xx) ---
    MISSING_ARGUMENT            = 21201
    INVALID_ARGUMENT            = 21202
    UNKNOWN_TYPE                = 21203

    # --- permission errors (213xx) ---
    PERMISSION_DENIED           = 21301

    # --- execution errors (214xx) ---
    HANDLER_ERROR               = 21401
    COMPLETER_ERROR             = 21402

    # --- worker errors (215xx) ---
    TASK_REJECTED               = 21501

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandException(Exception):
    """
    base fault: a message plus read-only options.

    options are free-form context. the renderer understands:
    - title, code, hint: header and footer of the rendered fault.
    - node: the command node involved (its root name becomes the header prefix).
    - colorful, fancy: rendering style (defaults: colorful, plain).
    every other key is payload for reporters and callers (param, raw, tag, ...).
    """

    def __init__(self, message=Unset, /, **options):
        if not isinstance(message, str | Text | Unset):
            raise TypeError("fault message must be a string")
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    @property
    def hint(self):
        return self.options.get("hint")

    def __rich__(self):
        main = __import__("__main__")
        palette = PALETTE | getattr(main, "__styles__", {})
        colorful = self.options.get("colorful", True)

        def text(fragment, role):
            if not colorful:
                return Text(str(fragment or ""))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment or ""), palette.get(role, ""))

        node = self.options.get("node")
        code = self.options.get("code")
        header = Text.assemble(
            "[ ",
            text(getattr(main, "__prog__", node.root.name if node is not None else "bosun"), "prog-name"),
            " — ",
            text(code.normalize() if isinstance(code, FaultCode) else "?", "code"),
            " | ",
            text(str(self.options.get("title", type(self).__name__)).title(), "error-title"),
            " ]",
        )
        body = [text(self.message, "error-message")]
        if hint := self.options.get("hint"):
            body.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

        if self.options.get("fancy", False):
            return Panel(Group(*body), title=header, title_align="left")
        return Group(header, *body)

    def __trigger__(self):
        raise self from self.options.get("cause")

    def __replace__(self, /, **overrides):
        return type(self)(self.message, **{**self.options, **overrides})


class RegistrationError(CommandException): ...
class DuplicateNameError(RegistrationError): ...


class BindingError(CommandException):
    @property
    def param(self):
        """
        name of the parameter that failed to bind.
        """
        return self.options.get("param")


class MissingArgumentError(BindingError): ...


class InvalidArgumentError(BindingError):
    @property
    def raw(self):
        """
        raw token (or raw default) that the converter refused.
        """
        return self.options.get("raw")


class UnknownTypeError(BindingError): ...
class PermissionDeniedError(CommandException): ...


class HandlerError(CommandException):
    @property
    def tag(self):
        """
        classification tag handed to the reporter ("command", "async subcommand", ...).
        """
        return self.options.get("tag")


class RejectedTaskError(CommandException): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given context options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see CommandException).
    - options are merged into a copy of the fault via copy.replace(...) before
      triggering; the copy is what gets raised.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings; when
    not found, returns None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "CommandException",
    "RegistrationError",
    "DuplicateNameError",
    "BindingError",
    "MissingArgumentError",
    "InvalidArgumentError",
    "UnknownTypeError",
    "PermissionDeniedError",
    "HandlerError",
    "RejectedTaskError",
    "trigger",
    "getdoc",
)
