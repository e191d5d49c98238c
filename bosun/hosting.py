"""
Bosun host adapter.

A host (game server, chat bot, shell) usually keeps its own command table
keyed by root label. mount() registers one HostCommand per registered root;
each adapter forwards execution to the Dispatcher and completion to the
CompletionEngine, starting from its own root whatever label the host used
(namespaced labels such as "plugin:give" included).

    table.register(namespace, command)   # the only host call bosun makes
"""
import logging
from typing import Protocol, runtime_checkable

from .completion import CompletionEngine
from .dispatcher import Dispatcher
from .nodes import CommandNode

logger = logging.getLogger(__name__)


@runtime_checkable
class CommandTable(Protocol):
    def register(self, namespace, command, /): ...


class HostCommand:
    """
    Entry point of one root command in a host command table.

    description and usage are plain strings, empty when unset.
    """

    def __init__(self, root, dispatcher, completion, /):
        if not isinstance(root, CommandNode):
            raise TypeError("host-command 'root' must be a command node")
        if not isinstance(dispatcher, Dispatcher):
            raise TypeError("host-command 'dispatcher' must be a dispatcher")
        if not isinstance(completion, CompletionEngine):
            raise TypeError("host-command 'completion' must be a completion engine")
        self._root = root
        self._dispatcher = dispatcher
        self._completion = completion

    root = property(lambda self: self._root)
    name = property(lambda self: self._root.name)
    aliases = property(lambda self: list(self._root.aliases))
    permission = property(lambda self: self._root.permission)
    description = property(lambda self: str(self._root.description or ""))
    usage = property(lambda self: str(self._root.usage or ""))

    def execute(self, sender, label, args=(), /):
        return self._dispatcher.execute(sender, self._dispatcher.descend(self._root, label, args))

    def complete(self, sender, label, args=(), /):
        return self._completion.suggest(sender, self._root, args)

    def __repr__(self):
        return f"host-command(name={self.name!r}, aliases={self.aliases!r})"


def mount(table, dispatcher, completion, /, *, namespace):
    """
    Register one HostCommand per root of the dispatcher's registry in `table`
    under `namespace` (lowercased), and return the adapters in registration order.
    """
    if not callable(getattr(table, "register", None)):
        raise TypeError("mount() table must provide a register() method")
    if not isinstance(namespace, str) or not (namespace := namespace.strip().lower()):
        raise ValueError("mount() namespace must be a non-empty string")
    if completion.registry is not dispatcher.registry:
        raise ValueError("mount() dispatcher and completion engine must share a registry")

    commands = []
    for root in dispatcher.registry:
        command = HostCommand(root, dispatcher, completion)
        table.register(namespace, command)
        logger.debug("mounted %r under namespace %r", root.name, namespace)
        commands.append(command)
    return commands


__all__ = (
    "CommandTable",
    "HostCommand",
    "mount",
)
