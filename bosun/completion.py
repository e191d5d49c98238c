"""
Bosun tab completion.

complete(sender, label, args) walks the same tree as the dispatcher, read-only:
- descend from the root through args[:-1] (greedy, like resolution);
  the last token is the prefix being typed.
- one token left and the node has children: names and aliases of the
  children the sender may use, whose lowercase form starts with the
  lowercase prefix (ordered, de-duplicated).
- otherwise, a node completer (permission-gated) is asked with the node's
  remaining arguments.
- otherwise nothing.

Completion never invokes an executor. A failing completer, or one returning
a single string instead of an iterable of strings, is reported with the
"tab completer" tag and yields no suggestions.
"""
import logging

from rich.text import Text

from .faults import *
from .registry import Registry
from .reporting import LoggingReporter
from .utils import *

logger = logging.getLogger(__name__)


def _allowed(sender, node):
    return node.permission is None or sender.has_permission(node.permission)


class CompletionEngine:
    def __init__(self, registry, /, *, reporter=Unset):
        if not isinstance(registry, Registry):
            raise TypeError("completion-engine 'registry' must be a registry")
        if not callable(getattr(reporter := LoggingReporter() if reporter is Unset else reporter, "report", None)):
            raise TypeError("completion-engine 'reporter' must provide a report() method")
        self._registry = registry
        self._reporter = reporter

    registry = property(lambda self: self._registry)
    reporter = property(lambda self: self._reporter)

    def complete(self, sender, label, args=(), /):
        """
        Return suggestions for the last token of `args` under root `label`.
        """
        if (node := self._registry.find(label)) is None:
            return []
        return self.suggest(sender, node, args)

    def suggest(self, sender, node, args=(), /):
        """
        Suggestions for the last token of `args` below a known `node`.
        """
        if not (args := tuple(args)):
            return []

        index = 0
        while index < len(args) - 1 and (child := node.find(args[index])) is not None:
            node = child
            index += 1
        remaining = args[index:]

        if len(remaining) == 1 and node.children:
            return self._children(sender, node, remaining[0])

        if node.completer is not None and _allowed(sender, node):
            return self._custom(sender, node, remaining)

        return []

    def _children(self, sender, node, prefix):
        prefix = prefix.lower()
        suggestions = []
        for child in node.children:
            if not _allowed(sender, child):
                continue
            for label in (child.name, *child.aliases):
                if label.lower().startswith(prefix) and label not in suggestions:
                    suggestions.append(label)
        return suggestions

    def _custom(self, sender, node, args):
        try:
            suggestions = node.completer(sender, list(args))
            if isinstance(suggestions, str | Text):
                raise TypeError("completer must return an iterable of strings, not a single string")
            return [] if suggestions is None else [str(suggestion) for suggestion in suggestions]
        except Exception as exception:
            fault = HandlerError(
                "tab completer of %r failed: %s" % (node.route, exception),
                title="completer error",
                code=FaultCode.COMPLETER_ERROR,
                node=node,
                tag="tab completer",
                cause=exception,
            )
        try:
            self._reporter.report("tab completer", fault)
        except Exception:
            logger.exception("reporter failed for tab completer")
        return []

    def __repr__(self):
        return f"completion-engine(registry={self._registry!r})"


__all__ = (
    "CompletionEngine",
)
