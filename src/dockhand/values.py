"""Values supplied either literally or computed on demand.

Repository URLs, tags and credentials are often only known at run time (a
registry URL looked up from an account ID, tags derived from a commit). They
are passed as :class:`Fixed` or :class:`Resolver` and resolved once, at the
point of use, with the object being operated on as context.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Fixed(Generic[T]):
    value: T


@dataclass(frozen=True)
class Resolver(Generic[T]):
    fn: Callable[[Any], T]


Deferred = Fixed[T] | Resolver[T]


def resolve(value: Fixed[T] | Resolver[T] | T, context: Any = None) -> T:
    """Return the literal, or call the resolver with *context*.

    Anything that is not a :class:`Fixed` or :class:`Resolver` is returned
    unchanged, so plain values can be passed wherever a deferred one is
    accepted.
    """
    if isinstance(value, Resolver):
        return value.fn(context)
    if isinstance(value, Fixed):
        return value.value
    return value
