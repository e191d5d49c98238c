"""
Bosun execution context and sender capability.

- Sender: what the engine needs from whoever issued a command (permission
  predicate, message sink, player-likeness). The engine never stores a
  sender beyond the context of one invocation.
- ConsoleSender: a Sender printing through a rich console with a static
  permission set (operators, demos, tests).
- ExecutionContext: the immutable per-invocation view handed to executors.
"""
import functools
from types import MappingProxyType
from typing import Protocol, runtime_checkable

from rich.console import Console

from .parameters import bind, converters
from .utils import *


@runtime_checkable
class Sender(Protocol):
    def has_permission(self, permission, /): ...
    def send_message(self, message, /): ...
    def is_player_like(self): ...


class ConsoleSender:
    """
    Sender backed by a rich console.

    - permissions: iterable of capability strings; "*" grants everything.
    - player: whether the sender should be treated as a player.
    - console: the rich Console to print to (a fresh stdout console by default).
    """

    def __init__(self, name="console", /, permissions=("*",), *, player=False, console=Unset):
        if not isinstance(name, str) or not name.strip():
            raise TypeError("console-sender 'name' must be a non-empty string")
        if isinstance(permissions, str):
            raise TypeError("console-sender 'permissions' must be an iterable of strings")
        self.name = name.strip()
        self.permissions = frozenset(permissions)
        self.player = bool(player)
        self.console = Console(highlight=False) if console is Unset else console

    def has_permission(self, permission, /):
        return "*" in self.permissions or permission in self.permissions

    def send_message(self, message, /):
        self.console.print(message)

    def is_player_like(self):
        return self.player

    def __repr__(self):
        return f"console-sender(name={self.name!r}, permissions={tuple(sorted(self.permissions))!r}, player={self.player!r})"


class ExecutionContext:
    """
    Immutable per-invocation context.

    Attributes
    - sender: the issuing Sender.
    - label: the token that selected the node (root label or subcommand token).
    - args: raw tokens left for the node after subcommand tokens were stripped.
    - node: the resolved CommandNode.
    - arguments: parameter name → converted value, bound on first access and
      cached; binding faults propagate from that first access.
    """

    def __init__(self, sender, label, args, node, /, converters=Unset):
        self._sender = sender
        self._label = label
        self._args = tuple(args)
        self._node = node
        self._converters = converters

    sender = property(lambda self: self._sender)
    label = property(lambda self: self._label)
    args = property(lambda self: self._args)
    node = property(lambda self: self._node)

    @functools.cached_property
    def arguments(self):
        return MappingProxyType(bind(self._node.parameters, self._args, coalesce(self._converters, converters)))

    @property
    def argc(self):
        return len(self._args)

    def arg(self, index, /):
        """
        Raw token at `index`, or None when out of range.
        """
        if 0 <= index < len(self._args):
            return self._args[index]
        return None

    @property
    def is_player(self):
        return bool(self._sender.is_player_like())

    @property
    def player(self):
        return self._sender if self.is_player else None

    def reply(self, message, /):
        self._sender.send_message(message)

    def get(self, name, default=None, /):
        return self.arguments.get(name, default)

    def __getitem__(self, name):
        return self.arguments[name]

    def __contains__(self, name):
        return name in self.arguments

    def __repr__(self):
        return f"execution-context(label={self._label!r}, args={self._args!r}, node={self._node.route!r})"


__all__ = (
    "Sender",
    "ConsoleSender",
    "ExecutionContext",
)
