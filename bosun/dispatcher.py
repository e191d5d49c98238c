"""
Bosun dispatcher: resolve, authorize, bind, invoke.

Resolution
- The label selects a root (names first, then aliases, case-insensitive).
- While the next token matches a child of the current node, descend into it;
  the matched token becomes the label and is stripped from the arguments.
- Greedy and single pass: there is no backtracking.

dispatch(sender, label, args) -> bool (handled)
- unknown root                     -> False
- sender lacks target's permission -> one denial message, True
- target without executor          -> False
- binding fault                    -> fault message (+ usage line), True
- asynchronous target              -> submitted to the worker pool, True
- synchronous target               -> executor runs here, True

Executor exceptions never propagate: they are wrapped in HandlerError and
handed to the reporter with a classification tag. A reporter that fails in
turn is logged.

Only the target's own permission is checked, never an ancestor's.
"""
import logging
from typing import NamedTuple

from rich.text import Text

from .context import ExecutionContext
from .faults import *
from .parameters import ConverterRegistry, converters as defaults
from .registry import Registry
from .reporting import LoggingReporter
from .utils import *
from .workers import WorkerPool

logger = logging.getLogger(__name__)

DENIAL = "you don't have permission to use this command."


class Resolution(NamedTuple):
    node: object
    label: str
    args: tuple


def _classify(node):
    return ("async " if node.asynchronous else "") + ("subcommand" if node.parent is not None else "command")


class Dispatcher:
    """
    Routes invocations through a Registry.

    Options (keyword-only)
    - converters: ConverterRegistry used for binding (module defaults otherwise).
    - pool: WorkerPool for asynchronous nodes; when omitted, one is created on
      first use and owned (closed) by the dispatcher.
    - reporter: object with report(tag, error); LoggingReporter by default.
    - denial: message sent on a permission denial.
    """

    def __init__(self, registry, /, *, converters=Unset, pool=Unset, reporter=Unset, denial=Unset):
        if not isinstance(registry, Registry):
            raise TypeError("dispatcher 'registry' must be a registry")
        if not isinstance(converters := coalesce(converters, defaults), ConverterRegistry):
            raise TypeError("dispatcher 'converters' must be a converter registry")
        if pool is not Unset and not isinstance(pool, WorkerPool):
            raise TypeError("dispatcher 'pool' must be a worker pool")
        if not callable(getattr(reporter := LoggingReporter() if reporter is Unset else reporter, "report", None)):
            raise TypeError("dispatcher 'reporter' must provide a report() method")
        if not isinstance(denial := coalesce(denial, DENIAL), str | Text):
            raise TypeError("dispatcher 'denial' must be a string")

        self._registry = registry
        self._converters = converters
        self._pool = coalesce(pool)
        self._owned = pool is Unset
        self._reporter = reporter
        self._denial = denial

    registry = property(lambda self: self._registry)
    converters = property(lambda self: self._converters)
    reporter = property(lambda self: self._reporter)
    denial = property(lambda self: self._denial)

    @property
    def pool(self):
        """
        The worker pool for asynchronous nodes (created lazily when owned).
        """
        if self._pool is None:
            self._pool = WorkerPool()
        return self._pool

    def resolve(self, label, args=(), /):
        """
        Resolve `label` and `args` to Resolution(node, label, args), or None
        when the label names no root.
        """
        if (node := self._registry.find(label)) is None:
            return None
        return self.descend(node, label, args)

    def descend(self, node, label, args=(), /):
        """
        Resolve `args` below a known `node` reached through `label`.
        """
        args = tuple(args)
        index = 0
        while index < len(args) and (child := node.find(args[index])) is not None:
            node, label = child, args[index]
            index += 1
        return Resolution(node, label, args[index:])

    def dispatch(self, sender, label, args=(), /):
        if (resolution := self.resolve(label, args)) is None:
            logger.debug("no command registered under %r", label)
            return False
        return self.execute(sender, resolution)

    def execute(self, sender, resolution, /):
        """
        Run an already resolved invocation (see dispatch() for the outcomes).
        """
        node = resolution.node
        if node.permission is not None and not sender.has_permission(node.permission):
            self.deny(sender, node)
            return True

        if node.executor is None:
            logger.debug("command %r has no executor", node.route)
            return False

        context = ExecutionContext(sender, resolution.label, resolution.args, node, self._converters)
        try:
            context.arguments
        except BindingError as fault:
            logger.debug("binding failed for %r: %s", node.route, fault)
            sender.send_message(fault.message)
            if node.usage:
                sender.send_message(node.usage)
            return True

        tag = _classify(node)
        if node.asynchronous:
            try:
                self.pool.submit(self._invoke, node, context, tag)
            except RejectedTaskError as fault:
                self._report(tag, fault.__replace__(node=node, tag=tag))
            return True

        self._invoke(node, context, tag)
        return True

    def deny(self, sender, node, /):
        """
        Tell `sender` it may not run `node` and return the PermissionDeniedError
        describing the denial. Hosts may override this to audit denials.
        """
        fault = PermissionDeniedError(
            self._denial,
            title="permission denied",
            code=FaultCode.PERMISSION_DENIED,
            node=node,
            permission=node.permission,
        )
        logger.debug("denied %r: missing permission %r", node.route, node.permission)
        sender.send_message(fault.message)
        return fault

    def _report(self, tag, error):
        try:
            self._reporter.report(tag, error)
        except Exception:
            logger.exception("reporter failed for %s", tag)

    def _invoke(self, node, context, tag):
        try:
            node.executor(context)
        except Exception as exception:
            self._report(tag, HandlerError(
                "%s %r failed: %s" % (tag, node.route, exception),
                title="handler error",
                code=FaultCode.HANDLER_ERROR,
                node=node,
                tag=tag,
                cause=exception,
            ))

    def close(self, wait=True):
        """
        Shut down the worker pool when the dispatcher owns it.
        """
        if self._owned and self._pool is not None:
            self._pool.shutdown(wait=wait)

    def __enter__(self):
        return self

    def __exit__(self, *unused):
        self.close()

    def __repr__(self):
        return f"dispatcher(registry={self._registry!r})"


__all__ = (
    "Dispatcher",
    "Resolution",
    "DENIAL",
)
