"""
Normalized API result.

Every network-facing operation returns either Ok(value) or Err(error),
discriminated by the literal ``ok`` field, regardless of how the remote
endpoint physically responded.
"""

from enum import Enum
from typing import Any, Callable, Generic, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, Field
from typing_extensions import TypeAliasType

T = TypeVar("T")
U = TypeVar("U")


class ApiError(BaseModel):
    """Error details carried by a failed result."""

    code: str
    message: str
    status_code: Optional[int] = Field(None, description="HTTP status when a response was received")


class Ok(BaseModel, Generic[T]):
    """Successful result."""

    ok: Literal[True] = True
    value: T

    def map(self, fn: Callable[[T], U]) -> "Ok[U]":
        return Ok(value=fn(self.value))


class Err(BaseModel):
    """Failed result."""

    ok: Literal[False] = False
    error: ApiError

    @property
    def error_code(self) -> str:
        return self.error.code

    @property
    def error_message(self) -> str:
        return self.error.message

    def map(self, fn: Callable[[Any], Any]) -> "Err":
        return self


# Ok[T] is plain Ok under pydantic, so T is declared on the alias
ApiResult = TypeAliasType("ApiResult", Union[Ok[T], Err], type_params=(T,))


def ok(value: Any) -> Ok:
    """Build a successful result."""
    return Ok(value=value)


def err(code: str, message: str, status_code: Optional[int] = None) -> Err:
    """Build a failed result."""
    if isinstance(code, Enum):
        code = code.value
    return Err(error=ApiError(code=code, message=message, status_code=status_code))
