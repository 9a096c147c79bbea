"""
Exception types raised while running step tests.

Two families:
- ExpectationError (an AssertionError): the cluster answered, but not with
  what the test expected. Timeouts and authoring mistakes are reported this
  way too, so pytest renders them as ordinary test failures.
- StepHarnessError: the cluster could not be talked to or reported a
  failure of its own (write rejected, compaction failed, query errored).
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class QueryErrorCode(str, Enum):
    """Status codes a query can fail with (gRPC status names)."""

    OK = "OK"
    CANCELLED = "CANCELLED"
    UNKNOWN = "UNKNOWN"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    DEADLINE_EXCEEDED = "DEADLINE_EXCEEDED"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    RESOURCE_EXHAUSTED = "RESOURCE_EXHAUSTED"
    FAILED_PRECONDITION = "FAILED_PRECONDITION"
    ABORTED = "ABORTED"
    OUT_OF_RANGE = "OUT_OF_RANGE"
    UNIMPLEMENTED = "UNIMPLEMENTED"
    INTERNAL = "INTERNAL"
    UNAVAILABLE = "UNAVAILABLE"
    DATA_LOSS = "DATA_LOSS"
    UNAUTHENTICATED = "UNAUTHENTICATED"


class StepHarnessError(Exception):
    """Base class for collaborator-side failures."""


class ClusterError(StepHarnessError):
    """A cluster operation failed (non-success status, transport error, ...)."""

    def __init__(
        self,
        operation: str,
        message: str,
        status_code: Optional[int] = None,
    ) -> None:
        self.operation = operation
        self.message = message
        self.status_code = status_code
        prefix = f"[{status_code}] " if status_code is not None else ""
        super().__init__(f"{operation} failed: {prefix}{message}")


class QueryError(ClusterError):
    """A query was rejected by the cluster with a status code and message."""

    def __init__(self, code: QueryErrorCode, message: str) -> None:
        self.code = QueryErrorCode(code)
        super().__init__("query", message)

    def __str__(self) -> str:
        return f"query failed with {self.code.value}: {self.message}"


class ExpectationError(AssertionError):
    """Observed cluster behaviour did not match the test's expectation."""


class PreconditionError(ExpectationError):
    """The step sequence itself is wrong (e.g. asserting on a write that never happened)."""


class PollTimeoutError(ExpectationError):
    """A wait did not see its condition become true before the deadline."""

    def __init__(self, description: str, timeout: float, last_observed: Any) -> None:
        self.description = description
        self.timeout = timeout
        self.last_observed = last_observed
        super().__init__(
            f"timed out after {timeout:g}s waiting for {description} "
            f"(last observed: {last_observed!r})"
        )
