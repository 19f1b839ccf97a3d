"""
Error taxonomy and result values for the Phantasma SDK
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional


class ErrorKind(str, Enum):
    """Classification of every failure the SDK reports"""
    API_ERROR = "API_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    PARSE_ERROR = "PARSE_ERROR"
    MALFORMED_RESPONSE = "MALFORMED_RESPONSE"
    CONFIRMATION_FAILED = "CONFIRMATION_FAILED"


class DecodeError(ValueError):
    """A response node does not have the shape a record expects"""


@dataclass
class ApiResult:
    """
    Outcome of a facade operation: a value or a classified error.

    Example:
        >>> result = client.get_block_height("main")
        >>> if result.ok:
        ...     print(result.value)
        ... else:
        ...     print(result.error_kind, result.message)
    """
    value: Any = None
    error_kind: Optional[ErrorKind] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error_kind is None

    @classmethod
    def success(cls, value: Any) -> "ApiResult":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "ApiResult":
        return cls(error_kind=kind, message=message)

    def dispatch(
        self,
        on_success: Callable[[Any], None],
        on_error: Optional[Callable[[ErrorKind, str], None]] = None
    ) -> None:
        """
        Hand the outcome to continuation-style callbacks.

        Args:
            on_success: Called with the decoded value
            on_error: Called with (kind, message); ignored failures if None
        """
        if self.ok:
            on_success(self.value)
        elif on_error is not None:
            on_error(self.error_kind, self.message or "")
