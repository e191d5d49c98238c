r"""
Bosun parameters, converters, and binding.

Overview
- Parameter: one positional, value-bearing slot of a command node.
  • name: label used in messages and as the key of the bound mapping.
  • type: a semantic tag ("integer", "player", ...) resolved through a
    ConverterRegistry, or a converter callable used as-is.
  • required/default: when tokens run out, the default is substituted; a
    required slot without default fails; an optional one binds None.
  • catchall: trailing slot absorbing every remaining token joined by one space.

- ConverterRegistry: tag → converter mapping (case-insensitive tags, aliases).
  The module-level `converters` registry carries the built-in tags:
  string/text, integer/int, long, real/double/float, boolean/bool.
  entity(lookup) builds a domain converter ("online-entity-by-name") from a
  lookup callable returning None when nothing matches.

- bind(parameters, tokens, converters): the positional binding algorithm.
  Pure: it never touches the sender or host state, only raises binding faults.

Quick example:
    >>> from bosun.parameters import Parameter, bind
    >>> bind((Parameter("target"), Parameter("amount", type="integer", default="1")), ["steve"])
    {'target': 'steve', 'amount': 1}
"""
import builtins
import functools
import operator
import re
from collections import deque

from rich.text import Text

from .faults import *
from .utils import *


class ParameterType(type):
    """
    Metaclass giving parameters stable introspection.

    - __typename__ is derived from the class name (camel-case split with hyphens).
    - every name in __introspectable__ without an explicit property becomes a
      read-only property mirroring the private "_{name}" field.
    - __repr__/__rich_repr__ yield the introspectable fields in order.
    """
    __introspectable__ = ()

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
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


class Parameter(metaclass=ParameterType):
    """
    Positional, value-bearing parameter of a command node.

    Properties
    - name, type, required, default, descr, catchall are read-only.
    - defaulted tells a missing default apart from an explicit default of None.
    - metavar renders the slot for synopsis lines: <name>, [name], [name...].
    """

    __introspectable__ = (
        "name",
        "type",
        "required",
        "default",
        "descr",
        "catchall",
    )

    def __init__(self, name, /, type="string", required=Unset, default=Unset, descr=Unset, *, catchall=False):
        """
        Construct a parameter.

        Parameters
        - name: str
          Non-empty, without whitespace.
        - type: str | Callable[[str], Any]
          Converter tag (case-insensitive, resolved at bind time) or a converter.
        - required: bool | Unset
          Defaults to True unless a default is given.
        - default: Any | Unset
          String defaults go through the converter like a token would; any
          other object is bound as-is.
        - descr: str | Text | Unset
          Short description; None when Unset.
        - catchall: bool
          Absorb the remaining tokens; only valid as the last parameter.
        """
        cls = builtins.type(self)
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif not re.fullmatch(r"\S+", name := name.strip()):
            raise ValueError(f"{cls.__typename__} 'name' must be a non-empty string without whitespace")

        if isinstance(type, str):
            if not (type := type.strip().lower()):
                raise ValueError(f"{cls.__typename__} 'type' cannot be empty")
        elif not callable(type):
            raise TypeError(f"{cls.__typename__} 'type' must be a string tag or a converter")

        if not isinstance(required, bool | Unset):
            raise TypeError(f"{cls.__typename__} 'required' must be a boolean")

        if not isinstance(descr, str | Text | Unset):
            raise TypeError(f"{cls.__typename__} 'descr' must be a string")
        elif isinstance(descr, str) and not (descr := descr.strip()):
            raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")

        self._name = name
        self._type = type
        self._required = coalesce(required, default is Unset)
        self._default = default
        self._descr = coalesce(descr)
        self._catchall = bool(catchall)

    @property
    def default(self):
        return coalesce(self._default)

    @property
    def defaulted(self):
        return self._default is not Unset

    @property
    def optional(self):
        return not self._required

    @property
    def metavar(self):
        label = self._name + ("..." if self._catchall else "")
        return f"<{label}>" if self._required else f"[{label}]"


def _string(raw, /):
    return raw


def _bounded(low, high):
    def convert(raw, /):
        if not re.fullmatch(r"[+-]?[0-9]+", raw):
            raise ValueError(f"{raw!r} is not a whole number")
        if not low <= (value := int(raw)) <= high:
            raise ValueError(f"{raw!r} is out of range [{low}, {high}]")
        return value
    return convert


_integer = rename(_bounded(-2 ** 31, 2 ** 31 - 1), "integer")
_long = rename(_bounded(-2 ** 63, 2 ** 63 - 1), "long")


_REAL = re.compile(r"[+-]?(?:NaN|Infinity|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)")


def _real(raw, /):
    # "NaN" and "Infinity" are spelled out and case-sensitive; "inf" and "nan" are refused
    if not _REAL.fullmatch(raw := raw.strip()):
        raise ValueError(f"{raw!r} is not a number")
    return float(raw)


def _boolean(raw, /):
    return raw.lower() == "true"


def entity(lookup, /, *, kind="entity"):
    """
    Build a converter resolving a name to a live entity through `lookup`.

    The lookup returns the entity or None; None is a conversion failure
    (e.g., "player not found: steve").

    Example
        converters.register("player", entity(server.online_player, kind="player"))
    """
    if not callable(lookup):
        raise TypeError("entity() argument must be callable")

    @rename(kind)
    def convert(raw, /):
        if (found := lookup(raw)) is None:
            raise LookupError(f"{kind} not found: {raw}")
        return found

    return convert


class ConverterRegistry:
    """
    Case-insensitive mapping from type tags to converters.

    - register(tag, converter, *aliases, replace=False) adds a tag and its aliases.
    - resolve(tag) returns the converter or raises KeyError.
    - copy() derives an independent registry (hosts extend a copy of the defaults).
    """

    def __init__(self, source=Unset, /):
        self._converters = {}
        self._aliases = {}
        if isinstance(source, ConverterRegistry):
            self._converters.update(source._converters)
            self._aliases.update(source._aliases)
        elif source is not Unset:
            raise TypeError("ConverterRegistry() argument must be a converter registry")

    @property
    def tags(self):
        return tuple(self._converters) + tuple(self._aliases)

    def register(self, tag, converter, /, *aliases, replace=False):
        if not callable(converter):
            raise TypeError("register() converter must be callable")
        names = []
        for name in (tag, *aliases):
            if not isinstance(name, str):
                raise TypeError("register() tags must be strings")
            elif not (name := name.strip().lower()):
                raise ValueError("register() tags cannot be empty")
            elif name in names:
                raise ValueError(f"register() tag {name!r} is given twice")
            elif name in self and not replace:
                raise ValueError(f"register() tag {name!r} is already in use")
            names.append(name)

        tag, *aliases = names
        for name in names:
            self._converters.pop(name, None)
            self._aliases.pop(name, None)
        self._converters[tag] = converter
        self._aliases.update(dict.fromkeys(aliases, tag))
        return converter

    def resolve(self, tag, /):
        tag = tag.strip().lower()
        return self._converters[self._aliases.get(tag, tag)]

    def copy(self):
        return ConverterRegistry(self)

    def __contains__(self, tag):
        if not isinstance(tag, str):
            return False
        tag = tag.strip().lower()
        return tag in self._converters or tag in self._aliases

    def __getitem__(self, tag):
        return self.resolve(tag)

    def __len__(self):
        return len(self._converters)

    def __repr__(self):
        return f"converter-registry(tags={self.tags!r})"


converters = ConverterRegistry()
converters.register("string", _string, "text")
converters.register("integer", _integer, "int")
converters.register("long", _long)
converters.register("real", _real, "double", "float")
converters.register("boolean", _boolean, "bool")


def _convert(parameter, raw, position, registry):
    if callable(parameter.type):
        converter = parameter.type
    else:
        try:
            converter = registry.resolve(parameter.type)
        except KeyError:
            trigger(UnknownTypeError(
                "unknown type %r for argument %r" % (parameter.type, parameter.name),
                title="unknown argument type",
                code=FaultCode.UNKNOWN_TYPE,
                hint="register a converter for %r before dispatching" % parameter.type,
                param=parameter.name,
                tag=parameter.type,
            ))

    try:
        return converter(raw)
    except Exception as exception:
        trigger(InvalidArgumentError(
            "invalid value %r for argument %r at %s position" % (raw, parameter.name, ordinal(position)),
            title="invalid argument",
            code=FaultCode.INVALID_ARGUMENT,
            hint=str(exception) or "expected a value of type %r" % getattr(parameter.type, "__name__", parameter.type),
            param=parameter.name,
            raw=raw,
            position=position,
            cause=exception,
        ))


def bind(parameters, tokens, registry=Unset, /):
    """
    Bind raw tokens to parameters in declared order.

    Steps (per parameter)
    1. consume one token, or every remaining token joined by " " for a catch-all.
    2. tokens exhausted: substitute the default when there is one; a required
       parameter without default raises MissingArgumentError.
    3. tokens exhausted, optional, no default: bind None.
    4. convert the raw value; failures raise InvalidArgumentError, unknown tags
       raise UnknownTypeError.

    Returns
    - dict[str, Any] keyed by parameter name, in declared order.

    Notes
    - Surplus tokens are ignored here; the context still exposes them.
    """
    registry = coalesce(registry, converters)
    tokens = deque(tokens)
    arguments = {}

    for position, parameter in enumerate(parameters, 1):
        if tokens:
            if parameter.catchall:
                raw = " ".join(tokens)
                tokens.clear()
            else:
                raw = tokens.popleft()
        elif parameter.defaulted:
            if not isinstance(raw := parameter.default, str):
                arguments[parameter.name] = raw
                continue
        elif parameter.required:
            trigger(MissingArgumentError(
                "missing required argument %r at %s position" % (parameter.name, ordinal(position)),
                title="missing argument",
                code=FaultCode.MISSING_ARGUMENT,
                hint="provide a value for %s" % parameter.metavar,
                param=parameter.name,
                position=position,
            ))
        else:
            arguments[parameter.name] = None
            continue

        arguments[parameter.name] = _convert(parameter, raw, position, registry)

    return arguments


__all__ = (
    "Parameter",
    "ConverterRegistry",
    "converters",
    "entity",
    "bind",
)

del ParameterType
