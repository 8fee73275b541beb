"""Tagged success-or-error results returned at the public boundary.

Callers outside the core (routers, UI layers, the CLI) receive either
Ok(value) or Err(error) and never have to catch exceptions:

    result = bridge.list_folder("Documents")
    if isinstance(result, Err):
        show(result.message)
    else:
        render(result.value)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from ncbridge.core.errors import BridgeError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful result."""

    value: T

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Return the value."""
        return self.value


@dataclass(frozen=True)
class Err:
    """Failed result wrapping the error that stopped the operation."""

    error: BridgeError

    @property
    def ok(self) -> bool:
        return False

    @property
    def code(self) -> str:
        return self.error.code

    @property
    def message(self) -> str:
        return self.error.message

    @property
    def category(self) -> str:
        return self.error.category

    @property
    def status_code(self) -> int | None:
        return self.error.status_code

    @property
    def path(self) -> str | None:
        return self.error.path

    @property
    def operation(self) -> str | None:
        return self.error.operation

    def unwrap(self) -> Any:
        """Re-raise the wrapped error."""
        raise self.error

    def to_dict(self) -> dict[str, Any]:
        return self.error.to_dict()


Result = Union[Ok[T], Err]


def capture(func: Callable[..., T], *args: Any, **kwargs: Any) -> Result[T]:
    """Run func and wrap its outcome.

    Only BridgeError is converted; anything else is a bug and propagates.
    """
    try:
        return Ok(func(*args, **kwargs))
    except BridgeError as e:
        return Err(e)
