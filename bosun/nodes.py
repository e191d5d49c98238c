"""
Bosun command nodes: the unit of registration.

What this module provides
- CommandNode: immutable identity (name) plus mutable configuration
  (aliases, permission, description, usage, parameters, executor, completer,
  asynchronous) and an ordered list of exclusively owned children.
- find(token): case-insensitive lookup among children, names first, then aliases.
- attach(child): adds a child, rejecting sibling name/alias collisions.

Lifecycle
- Nodes are created (usually through bosun.builder) during startup, then
  handed to a Registry once. Registration marks the whole subtree as
  registered; configure()/attach() refuse further changes from then on.
- After registration the tree is read-only by contract: dispatch and
  completion walk it without locks, so hosts must not mutate node state by
  other means while dispatching.

Notes
- parent is a non-owning back-reference used for diagnostics (root, path,
  route, synopsis); resolution never walks upwards.
- Public containers are read-only views (tuples) of the private state.
"""
import builtins
import functools
import operator
import re
from collections.abc import Iterable

from rich.text import Text

from .faults import *
from .parameters import Parameter
from .utils import *


class NodeType(type):
    """
    Metaclass that gives nodes stable, readable introspection.

    Responsibilities
    - Expose every field listed in __introspectable__ (without an explicit
      property in the class body) as a read-only mirror() property.
    - Provide __repr__/__rich_repr__ restricted to __displayable__ when set,
      otherwise to __introspectable__.
    - Derive __typename__ from the class name (camel-case split with hyphens)
      for consistent messages: "command-node 'name' must be a string".
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            {
                name: mirror(name) for name in namespace.get("__introspectable__", ()) if name not in namespace
            } | namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - command-node(name='admin', aliases=('a',), ...)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _process_name(cls, metadata):
    """
    Validate the node name: a string, non-empty after trimming, no whitespace
    (tokens are whitespace-separated, so such a name could never match).
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    elif re.search(r"\s", name):
        raise ValueError(f"{cls.__typename__} 'name' cannot contain whitespace")
    metadata["name"] = name


def _process_aliases(cls, metadata, name):
    """
    Normalize aliases into an ordered tuple.

    Rules
    - must be an iterable of strings (a plain string is rejected; pass a tuple).
    - each alias is trimmed, non-empty, without whitespace.
    - duplicates (case-insensitive) and aliases equal to the node name are rejected.
    """
    if not isinstance(aliases := metadata["aliases"], Iterable) or isinstance(aliases, str | Text):
        raise TypeError(f"{cls.__typename__} 'aliases' must be an iterable of strings")

    seen = {name.lower()}
    sanitized = []
    for alias in aliases:
        if not isinstance(alias, str):
            raise TypeError(f"{cls.__typename__} 'aliases' must be an iterable of strings")
        elif not (alias := alias.strip()):
            raise ValueError(f"{cls.__typename__} 'aliases' cannot contain empty strings")
        elif re.search(r"\s", alias):
            raise ValueError(f"{cls.__typename__} alias {alias!r} cannot contain whitespace")
        elif alias.lower() in seen:
            raise ValueError(f"{cls.__typename__} alias {alias!r} is already in use by this command")
        seen.add(alias.lower())
        sanitized.append(alias)
    metadata["aliases"] = tuple(sanitized)


def _process_strings(cls, metadata):
    """
    Normalize optional display strings (permission, description, usage).

    - None and Unset both mean “not set” and become None.
    - strings are trimmed and must stay non-empty; rich Text is kept as-is
      (description/usage only; a permission is always a plain string).
    """
    for name in ("permission", "description", "usage"):
        if name not in metadata:
            continue
        kinds = str | None | Unset if name == "permission" else str | Text | None | Unset
        if not isinstance(object := metadata[name], kinds):
            raise TypeError(f"{cls.__typename__} {name!r} must be a string")
        elif isinstance(object, str) and not (object := object.strip()):
            raise ValueError(f"{cls.__typename__} {name!r} cannot be empty")
        metadata[name] = coalesce(object)


def _process_callables(cls, metadata):
    """
    Validate executor/completer: None (absent) or a callable.
    """
    for name in ("executor", "completer"):
        if name not in metadata:
            continue
        if (object := coalesce(metadata[name])) is not None and not callable(object):
            raise TypeError(f"{cls.__typename__} {name!r} must be callable")
        metadata[name] = object


def _process_parameters(cls, metadata):
    """
    Validate the ordered parameter list.

    Rules
    - every item is a Parameter; names are unique (case-insensitive).
    - required parameters precede all optional ones.
    - at most one catch-all parameter, and it is the last one.
    """
    if not isinstance(parameters := metadata["parameters"], Iterable) or isinstance(parameters, str):
        raise TypeError(f"{cls.__typename__} 'parameters' must be an iterable of parameters")

    names = set()
    optional = None
    catchall = None
    sanitized = []
    for parameter in parameters:
        if not isinstance(parameter, Parameter):
            raise TypeError(f"{cls.__typename__} 'parameters' must be an iterable of parameters")
        if parameter.name.lower() in names:
            raise ValueError(f"{cls.__typename__} parameter name {parameter.name!r} is already in use")
        if catchall:
            raise ValueError(f"{cls.__typename__} catch-all parameter {catchall!r} must be the last parameter")
        if parameter.required and optional:
            raise ValueError(f"{cls.__typename__} required parameter {parameter.name!r} cannot follow optional parameter {optional!r}")
        names.add(parameter.name.lower())
        optional = optional or (parameter.name if parameter.optional else None)
        catchall = parameter.name if parameter.catchall else None
        sanitized.append(parameter)
    metadata["parameters"] = tuple(sanitized)


def collisions(siblings, node, /):
    """
    Return the labels of `node` (name and aliases, lowercased) already used by
    any of `siblings`, ignoring `node` itself.
    """
    labels = set(node.labels)
    clashes = set()
    for sibling in siblings:
        if sibling is not node:
            clashes |= labels & set(sibling.labels)
    return clashes


class CommandNode(metaclass=NodeType):
    """
    A registered command or subcommand.

    Identity
    - name is fixed at construction; every other field is configuration.

    Structure
    - children: ordered, exclusively owned sub-nodes (see attach()).
    - parent: back-reference for diagnostics only.

    Dispatch-relevant configuration
    - permission: capability string checked against the sender (None = open).
    - parameters: ordered Parameter specs bound before the executor runs.
    - executor: callable(context); None when the node only groups subcommands.
    - completer: callable(sender, args) -> Iterable[str] for deeper positions.
    - asynchronous: run the executor on the dispatcher's worker pool.
    """

    __introspectable__ = (
        "name",
        "aliases",
        "permission",
        "description",
        "usage",
        "parameters",
        "executor",
        "completer",
        "asynchronous",
        "parent",
        "children",
    )

    # parent is left out on purpose: a child's repr must not recurse upward.
    __displayable__ = (
        "name",
        "aliases",
        "permission",
        "description",
        "usage",
        "parameters",
        "asynchronous",
        "children",
    )

    def __init__(
            self,
            name,
            /,
            aliases=(),
            permission=None,
            description=Unset,
            usage=Unset,
            parameters=(),
            executor=None,
            completer=None,
            *,
            asynchronous=False
    ):
        cls = builtins.type(self)
        metadata = {
            "name": name,
            "aliases": aliases,
            "permission": permission,
            "description": description,
            "usage": usage,
            "parameters": parameters,
            "executor": executor,
            "completer": completer,
            "asynchronous": bool(asynchronous),
        }
        _process_name(cls, metadata)
        _process_aliases(cls, metadata, metadata["name"])
        _process_strings(cls, metadata)
        _process_parameters(cls, metadata)
        _process_callables(cls, metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._parent = None
        self._children = []
        self._registered = False

    @property
    def labels(self):
        """
        Lowercased name followed by lowercased aliases (the keys tokens match against).
        """
        return (self._name.lower(), *(alias.lower() for alias in self._aliases))

    @property
    def registered(self):
        return self._registered

    @property
    def root(self):
        """
        Topmost node of the hierarchy this node belongs to.
        """
        child, parent = self, self._parent
        while parent:
            child, parent = parent, parent._parent
        return child

    @property
    def path(self):
        """
        Full ancestry from root to this node as a tuple.
        """
        path = [node := self]
        while node._parent:
            path.append(node := node._parent)
        return tuple(reversed(path))

    @property
    def route(self):
        """
        Space-joined names from the root, e.g. 'admin reload'.
        """
        return " ".join(node.name for node in self.path)

    @property
    def synopsis(self):
        """
        One-line call shape: the explicit usage when set, otherwise the route
        followed by parameter placeholders ('give <player> [amount]').
        """
        if self._usage:
            return str(self._usage)
        return " ".join((self.route, *(parameter.metavar for parameter in self._parameters)))

    def matches(self, token, /):
        """
        Whether `token` names this node (name or alias, case-insensitive).
        """
        return isinstance(token, str) and token.lower() in self.labels

    def find(self, token, /):
        """
        Find a child by token: names first, then aliases, case-insensitive.

        Returns None when no child matches.
        """
        if not isinstance(token, str):
            return None
        token = token.lower()
        for child in self._children:
            if child._name.lower() == token:
                return child
        for child in self._children:
            if token in (alias.lower() for alias in child._aliases):
                return child
        return None

    def _ensure_mutable(self):
        if self._registered:
            trigger(RegistrationError(
                "command %r is already registered and cannot be changed" % self.route,
                title="frozen command",
                code=FaultCode.FROZEN_NODE,
                hint="finish configuring commands before registering them",
                node=self,
            ))

    def configure(self, **options):
        """
        Replace configuration fields after validating them.

        Accepted keys: aliases, permission, description, usage, parameters,
        executor, completer, asynchronous. The name cannot be changed.

        Raises
        - TypeError/ValueError on invalid values or unknown keys.
        - RegistrationError (FROZEN_NODE) once the node is registered.
        - DuplicateNameError when new aliases clash with a sibling.
        """
        cls = builtins.type(self)
        self._ensure_mutable()

        if unknown := set(options) - (set(cls.__introspectable__) - {"name", "parent", "children"}):
            raise TypeError(f"{cls.__typename__} cannot configure {', '.join(sorted(unknown))}")

        metadata = dict(options)
        if "aliases" in metadata:
            _process_aliases(cls, metadata, self._name)
        _process_strings(cls, metadata)
        if "parameters" in metadata:
            _process_parameters(cls, metadata)
        _process_callables(cls, metadata)
        if "asynchronous" in metadata:
            metadata["asynchronous"] = bool(metadata["asynchronous"])

        if "aliases" in metadata and self._parent is not None:
            previous, self._aliases = self._aliases, metadata["aliases"]
            try:
                if clashes := collisions(self._parent._children, self):
                    trigger(DuplicateNameError(
                        "alias %s of command %r is already in use under %r" % (
                            ", ".join(map(repr, sorted(clashes))), self._name, self._parent.route
                        ),
                        title="duplicate name",
                        code=FaultCode.DUPLICATE_NAME,
                        hint="pick aliases that no sibling command uses",
                        node=self,
                        labels=frozenset(clashes),
                    ))
            finally:
                self._aliases = previous

        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    def attach(self, child, /):
        """
        Attach `child` as the last child of this node and return it.

        Rules
        - child must be a CommandNode without a parent and must not be an
          ancestor of this node (no cycles).
        - child's name and aliases must not clash (case-insensitive) with any
          existing child's name or aliases; otherwise DuplicateNameError is
          raised and the tree is left unchanged.
        """
        cls = builtins.type(self)
        if not isinstance(child, CommandNode):
            raise TypeError(f"{cls.__typename__} child must be a command node")
        if child._parent is not None or child._registered:
            raise ValueError(f"{cls.__typename__} {child.name!r} already belongs to a command tree")
        if child in self.path:
            raise ValueError(f"{cls.__typename__} {child.name!r} cannot be attached to itself or its descendants")
        self._ensure_mutable()

        if clashes := collisions(self._children, child):
            typeof = "subcommand" if self._parent else "command"
            trigger(DuplicateNameError(
                "%s name %s is already in use under %r" % (
                    typeof, ", ".join(map(repr, sorted(clashes))), self.route
                ),
                title="duplicate name",
                code=FaultCode.DUPLICATE_NAME,
                hint="rename %r or drop the clashing alias" % child.name,
                node=child,
                labels=frozenset(clashes),
            ))

        self._children.append(child)
        child._parent = self
        return child

    def walk(self):
        """
        Yield this node and every descendant, depth-first, in child order.
        """
        yield self
        for child in self._children:
            yield from child.walk()

    def _mark(self, registered, /):
        for node in self.walk():
            node._registered = registered


__all__ = (
    "CommandNode",
)

del NodeType
