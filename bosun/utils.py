"""
Bosun utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the node, parameter, and dispatch layers.
- Public-but-internal leaning: stable enough for hosts, designed primarily to
  support the higher-level modules.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/"".

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated callables for clean tracebacks.

- mirror("attr")
  • Read-only property factory exposing a private backing field (self._attr) as an
    immutable view (tuple, MappingProxyType, frozenset).

- ordinal(number)
  • Human-friendly ordinal labels ("first", "second", "11th") used in fault messages.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce(None, "fallback") is None
    True
    >>> ordinal(3)
    'third'
"""
import functools
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Sentinel for "not provided" where None is a legitimate value (a node
    without permission, an optional parameter bound to None).

    Falsey, printed as "Unset", a per-process singleton that survives copies
    and pickling, and usable in unions such as `str | Unset`.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")

    def __or__(self, other, /):
        return type(self) | other

    def __ror__(self, other, /):
        return other | type(self)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __reduce__(self):
        return "Unset"


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    Return `object`, or `default` when it is Unset. None, 0 and "" are kept.
    """
    return object if object is not Unset else default


def rename(target, name=Unset, /):
    """
    Give a generated callable a readable __name__/__qualname__.

    rename(callable, name) renames in place and returns the callable;
    rename(name) returns a decorator doing the same.
    """
    if name is Unset:
        if not isinstance(target, str):
            raise TypeError("@rename() argument must be a string")
        return functools.partial(_rename, name=target)
    return _rename(target, name)


def _rename(target, name):
    if not callable(target):
        raise TypeError("rename() target must be callable")
    if not isinstance(name, str):
        raise TypeError("rename() name must be a string")
    try:
        target.__name__ = target.__qualname__ = name
    except (AttributeError, TypeError):
        raise TypeError(f"cannot rename {target!r}") from None
    return target


def _freeze(object):
    """
    Shallow read-only view of a backing container.

    - Sequence (non-string) → tuple
    - Mapping               → MappingProxyType
    - Set                   → frozenset
    - anything else         → returned as-is
    """
    if isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(object)
    elif isinstance(object, Mapping):
        return MappingProxyType(object)
    elif isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors a private backing attribute.

    The generated property reads "_{name}" on the instance and returns a
    read-only view for container types, so callers cannot mutate node or
    parameter state through the public API.

    Example
    - Given self._aliases = ["tp"], declare aliases = mirror("aliases") and
      node.aliases returns ("tp",).
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


@functools.cache
def ordinal(number, /):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are rendered as words ("first"…"tenth").
    - Other numbers use numeric ordinals with English suffixes (11th, 21st, 102nd).
    """
    try:
        return (
            "first",
            "second",
            "third",
            "fourth",
            "fifth",
            "sixth",
            "seventh",
            "eighth",
            "ninth",
            "tenth",
        )[number - 1] if number >= 1 else str(number)
    except IndexError:
        pass

    # 11th, 12th, 13th (and 111th, 112th, 113th, ...)
    if 10 < number % 100 < 20:
        return f"{number}th"

    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


__all__ = (
    "UnsetType",
    "Unset",
    "coalesce",
    "rename",
    "mirror",
    "ordinal",
)
