"""
Bosun builder: fluent and declarative construction of command nodes.

Fluent
    >>> from bosun import Registry, builder
    >>> registry = Registry()
    >>> node = (
    ...     builder("give")
    ...     .aliases("g")
    ...     .permission("game.give")
    ...     .parameter("player", "player")
    ...     .parameter("amount", "integer", default="1")
    ...     .executor(lambda context: context.reply("done"))
    ...     .register(registry)
    ... )

Declarative
    @command("admin", permission="game.admin")
    def admin(context): ...

    @admin.command("reload", aliases=("rl",))
    def reload(context): ...

    admin.register(registry)

Every setter validates eagerly (TypeError/ValueError) and returns the same
builder. Once the node is registered, setters raise RegistrationError
(FROZEN_NODE).
"""
from collections.abc import Iterable

from rich.text import Text

from .nodes import CommandNode
from .parameters import Parameter
from .utils import *


class CommandBuilder:
    """
    Chained-setter wrapper around a not-yet-registered CommandNode.
    """

    def __init__(self, name, /):
        self._node = name if isinstance(name, CommandNode) else CommandNode(name)

    @property
    def node(self):
        return self._node

    @property
    def name(self):
        return self._node.name

    def _text(self, method, object):
        if not isinstance(object, str | Text):
            raise TypeError(f"{method}() argument must be a string")
        self._node.configure(**{method: object})
        return self

    def _callable(self, method, object, field=Unset):
        if not callable(object):
            raise TypeError(f"{method}() argument must be callable")
        self._node.configure(**{coalesce(field, method): object})
        return self

    def permission(self, permission, /):
        """
        Set the capability string required to run the node; None clears it.
        """
        if permission is not None and not isinstance(permission, str):
            raise TypeError("permission() argument must be a string or None")
        self._node.configure(permission=permission)
        return self

    def description(self, description, /):
        return self._text("description", description)

    def usage(self, usage, /):
        return self._text("usage", usage)

    def aliases(self, *aliases):
        """
        Append aliases to the ones already set (order kept, duplicates rejected).
        """
        self._node.configure(aliases=self._node.aliases + aliases)
        return self

    def executor(self, executor, /):
        return self._callable("executor", executor)

    def completer(self, completer, /):
        return self._callable("completer", completer)

    def tab_completer(self, completer, /):
        return self._callable("tab_completer", completer, "completer")

    def asynchronous(self, asynchronous=True, /):
        if not isinstance(asynchronous, bool):
            raise TypeError("asynchronous() argument must be a boolean")
        self._node.configure(asynchronous=asynchronous)
        return self

    def parameter(self, parameter, /, *args, **kwargs):
        """
        Declare the next positional parameter.

        Accepts a ready Parameter, or the Parameter constructor arguments:
            .parameter("amount", "integer", default="1")
        """
        if not isinstance(parameter, Parameter):
            parameter = Parameter(parameter, *args, **kwargs)
        elif args or kwargs:
            raise TypeError("parameter() takes no extra arguments when given a parameter")
        self._node.configure(parameters=self._node.parameters + (parameter,))
        return self

    def parameters(self, *parameters):
        for parameter in parameters:
            self.parameter(parameter)
        return self

    def subcommand(self, child, /):
        """
        Attach a child builder or node as the last subcommand.
        """
        if isinstance(child, CommandBuilder):
            child = child._node
        if not isinstance(child, CommandNode):
            raise TypeError("subcommand() argument must be a command builder or node")
        self._node.attach(child)
        return self

    def build(self):
        return self._node

    def register(self, registry, /):
        """
        Hand the node to `registry` and return it.
        """
        return registry.register(self._node)

    def command(self, source=Unset, /, **options):
        """
        Create a subcommand of this node.

        Same forms as the module-level command(); the result is attached
        before it is returned.
        """
        return command(source, parent=self, **options)

    def completes(self, completer, /):
        """
        Decorator form of completer(): @node.completes
        """
        self.completer(completer)
        return completer

    def __repr__(self):
        return f"command-builder({self._node!r})"

    def __rich_repr__(self):
        yield self._node


def builder(name, /):
    return CommandBuilder(name)


def _configure(target, options):
    for name in ("aliases", "parameters"):
        if name in options:
            if not isinstance(object := options.pop(name), Iterable) or isinstance(object, str):
                raise TypeError(f"command() {name!r} must be an iterable")
            getattr(target, name)(*object)
    for name in ("permission", "description", "usage", "completer", "asynchronous"):
        if name in options:
            getattr(target, name)(options.pop(name))
    if options:
        raise TypeError(f"command() got unexpected options: {', '.join(sorted(options))}")
    return target


def command(source=Unset, /, *, name=Unset, parent=Unset, **options):
    """
    Turn a function into the executor of a new command, or return a decorator
    that will do so.

    Forms
    - command(func, name="x", ...)     -> CommandBuilder (direct)
    - @command("x", ...) / @command()  -> decorator returning a CommandBuilder

    The name defaults to the function's __name__. Options: aliases,
    permission, description, usage, parameters, asynchronous, completer.
    When `parent` (a builder) is given, the new builder is attached to it.
    """
    if isinstance(source, str):
        if name is not Unset:
            raise TypeError("command() got multiple values for 'name'")
        source, name = Unset, source

    def wrapper(source, /):
        if not callable(source):
            raise TypeError("@command() must be applied to a callable")
        target = _configure(
            CommandBuilder(coalesce(name, getattr(source, "__name__", Unset))).executor(source),
            dict(options),
        )
        if parent is not Unset:
            parent.subcommand(target)
        return target
    wrapper = rename(wrapper, "command")

    return wrapper(source) if source is not Unset else wrapper


__all__ = (
    "CommandBuilder",
    "builder",
    "command",
)
