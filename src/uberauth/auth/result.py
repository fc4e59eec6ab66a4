"""Result type delivered to login completions."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from uberauth.exceptions import UberAuthError

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Successful outcome."""

    value: T


@dataclass(frozen=True)
class Failure:
    """Failed outcome."""

    error: UberAuthError


Result = Success[Any] | Failure

# Invoked exactly once per login attempt
Completion = Callable[[Result], None]
