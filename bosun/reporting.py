"""
Bosun error reporting.

A reporter receives everything that must not reach the sender: exceptions
raised by executors and completers, and rejected asynchronous submissions.

    reporter.report(tag, error)

tag classifies the failure ("command", "subcommand", "async command",
"async subcommand", "tab completer"); error is a HandlerError wrapping the
original exception (its `cause` option), or a RejectedTaskError.
"""
import logging
from typing import Protocol, runtime_checkable

from rich.traceback import Traceback

from .faults import *
from .faults import console as stderr
from .utils import *

logger = logging.getLogger(__name__)


@runtime_checkable
class Reporter(Protocol):
    def report(self, tag, error, /): ...


def _cause(error):
    if isinstance(error, CommandException):
        return error.options.get("cause") or error
    return error


class LoggingReporter:
    """
    Default reporter: one ERROR record per failure, traceback attached.
    """

    def __init__(self, log=Unset, /):
        self.log = coalesce(log, logger)

    def report(self, tag, error, /):
        cause = _cause(error)
        self.log.error("error in %s: %s", tag, error, exc_info=(type(cause), cause, cause.__traceback__))


class ConsoleReporter:
    """
    Render failures as faults on a rich console (stderr by default).

    Non-fault errors are wrapped in a HandlerError first so they render with
    the same header as the rest of the library.
    """

    def __init__(self, console=Unset, /, *, fancy=False, traceback=False):
        self.console = stderr if console is Unset else console
        self.fancy = bool(fancy)
        self.traceback = bool(traceback)

    def report(self, tag, error, /):
        if not isinstance(error, CommandException):
            error = HandlerError(
                "unhandled error in %s: %s" % (tag, error),
                title="handler error",
                code=FaultCode.HANDLER_ERROR,
                tag=tag,
                cause=error,
            )
        self.console.print(error.__replace__(fancy=self.fancy))
        if self.traceback and (cause := _cause(error)).__traceback__ is not None:
            self.console.print(Traceback.from_exception(type(cause), cause, cause.__traceback__))


__all__ = (
    "Reporter",
    "LoggingReporter",
    "ConsoleReporter",
)
