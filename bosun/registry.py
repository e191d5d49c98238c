"""
Bosun registry: the owned set of root command nodes.

- register(node) inserts a root after checking the sibling collision rule
  against every existing root; on failure nothing changes.
- find(token) resolves a root label (names first, then aliases).
- unregister(token) removes a root again (host reloads).

The registry is a plain value handed to the dispatcher and the completion
engine; there is no module-level registry.
"""
import logging

from .faults import *
from .nodes import CommandNode, collisions

logger = logging.getLogger(__name__)


class Registry:
    """
    Ordered collection of root command nodes.

    Iteration yields roots in registration order; `token in registry` and
    find() match names and aliases case-insensitively.
    """

    def __init__(self):
        self._roots = []

    @property
    def roots(self):
        return tuple(self._roots)

    def register(self, node, /):
        """
        Register `node` as a root and return it.

        Raises
        - TypeError when node is not a CommandNode.
        - RegistrationError (INVALID_REGISTRATION) when node already has a
          parent or is already registered.
        - DuplicateNameError when node's name or an alias clashes with any
          root's name or alias (case-insensitive). The registry is unchanged.
        """
        if not isinstance(node, CommandNode):
            raise TypeError("register() argument must be a command node")

        if node.parent is not None or node.registered:
            trigger(RegistrationError(
                "command %r cannot be registered as a root" % node.route,
                title="invalid registration",
                code=FaultCode.INVALID_REGISTRATION,
                hint="only register detached, unregistered commands",
                node=node,
            ))

        if clashes := collisions(self._roots, node):
            trigger(DuplicateNameError(
                "command name %s is already registered" % ", ".join(map(repr, sorted(clashes))),
                title="duplicate name",
                code=FaultCode.DUPLICATE_NAME,
                hint="rename %r or drop the clashing alias" % node.name,
                node=node,
                labels=frozenset(clashes),
            ))

        self._roots.append(node)
        node._mark(True)
        logger.debug("registered command %r (%d nodes)", node.name, sum(1 for _ in node.walk()))
        return node

    def unregister(self, token, /):
        """
        Remove the root matching `token` and return it; KeyError when unknown.

        The removed tree is unmarked so it can be reconfigured and registered again.
        """
        if (node := self.find(token)) is None:
            raise KeyError(token)
        self._roots.remove(node)
        node._mark(False)
        logger.debug("unregistered command %r", node.name)
        return node

    def find(self, token, /):
        """
        Find a root by label: names first, then aliases, case-insensitive.
        """
        if not isinstance(token, str):
            return None
        token = token.lower()
        for node in self._roots:
            if node.name.lower() == token:
                return node
        for node in self._roots:
            if token in (alias.lower() for alias in node.aliases):
                return node
        return None

    def __contains__(self, token):
        return self.find(token) is not None

    def __iter__(self):
        return iter(tuple(self._roots))

    def __len__(self):
        return len(self._roots)

    def __repr__(self):
        return f"registry(roots={tuple(node.name for node in self._roots)!r})"

    def __rich_repr__(self):
        yield "roots", tuple(self._roots)


__all__ = (
    "Registry",
)
