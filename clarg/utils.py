"""
Clarg utilities: the sentinel and record machinery behind descriptors and snapshots.

Contents
- Unset / UnsetType: marks an absent default or keyword, so None stays a real value.
- coalesce(value, default): Unset becomes the default, anything else passes through.
- rename(callable, name) / @rename(name): give generated callables readable names.
- mirror(name): read-only property over self._name that hands out frozen containers.
- SealedType: metaclass for Opt and Args; publishes __introspectable__ fields,
  writes their repr and forbids subclassing.

    >>> coalesce(Unset, 3), coalesce(0, 3)
    (3, 0)
"""
import builtins
import functools
import operator
import re
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Type of the Unset sentinel; calling it always returns that one instance.

    Unset is falsey and prints as "Unset". An option default of None is a
    default, an option default of Unset is none at all.
    """

    def __or__(self, other, /):
        # Lets annotations and isinstance checks write `str | Unset`.
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    object, unless it is Unset; then default.

    Only Unset is replaced: None, 0, "" and () are returned unchanged.
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    rename(callable, name) sets __name__ and __qualname__ and returns callable;
    rename(name) returns a decorator doing the same.

    Raises TypeError for a non-callable, a non-string name, or a callable whose
    names cannot be assigned (builtins).
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a callable with assignable names") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _immortalize(object):
    """
    Recursively freeze container values.

    Behavior
    - Sequence (non-string): a tuple with each element frozen.
    - Mapping: a read-only MappingProxyType over a fresh dict; keys are kept,
      values are frozen.
    - Set: a frozenset with each element frozen.
    - Anything else (including Unset and callables): returned as-is.
    """
    if isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(map(_immortalize, object))
    elif isinstance(object, Mapping):
        return MappingProxyType(dict(zip(object.keys(), map(_immortalize, object.values()))))
    elif isinstance(object, Set):
        return frozenset(map(_immortalize, object))
    else:
        return object


def mirror(name, /):
    """
    Define a read-only property that mirrors a private backing attribute.

    The generated property reads from an attribute named "_{name}" on the
    instance and returns an immutable view of container values.

    Example
    - Given self._opts, declare opts = mirror("opts") to expose it safely.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _immortalize(getattr(self, "_" + name))

    return property(getter)


class SealedType(type):
    """
    Metaclass for immutable, introspectable records (descriptors and snapshots).

    Responsibilities
    - Expose every name listed in __introspectable__ as a read-only property
      backed by "_{name}" (see mirror()).
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics and rich pretty printing.
    - Seal the class against subclassing; behavior is selected by data (a kind
      tag), never by inheritance.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        if "__repr__" not in namespace:
            @rename("__repr__")
            def __repr__(self):
                """
                Return a concise, stable representation with key metadata.

                Example
                - opt(kind=<OptKind.INT: 'int'>, name='count', flags=('-c', '--count'), ...)
                """
                return f"{type(self).__typename__}({
                    ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
                })"
            self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (name, object) pairs for pretty printers.
            """
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        @rename("__init_subclass__")
        def __init_subclass__(cls, **options):  # NOQA: F-841
            raise TypeError(f"type {self.__name__!r} is not an acceptable base type")
        self.__init_subclass__ = classmethod(__init_subclass__)

        return self


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",

    # Types
    "UnsetType",
    "SealedType",

    # Constants
    "Unset",
)
