"""
Step Models

Defines the closed set of actions a step test can perform and the polling
parameters used by the "wait for ..." steps.

Steps are plain immutable values; the dispatch logic lives in
stepharness.core.step_test.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import (
    TYPE_CHECKING,
    Any,
    Awaitable,
    Callable,
    Mapping,
    Optional,
    Sequence,
    Union,
)

from pydantic import BaseModel, ConfigDict, Field

from stepharness.config import settings
from stepharness.core.helpers import preview_query_for_log, truncate_str_for_log
from stepharness.errors import QueryErrorCode

if TYPE_CHECKING:
    from stepharness.core.step_test import StepTestState


Row = dict[str, Any]
ExpectedRows = Sequence[Union[str, Mapping[str, Any]]]

# Validation callbacks are expected to raise (usually AssertionError) on failure.
# They may be plain functions or coroutine functions.
QueryValidationFn = Callable[[list[Row]], Optional[Awaitable[None]]]
MetricsValidationFn = Callable[["StepTestState", str], Optional[Awaitable[None]]]
CustomFn = Callable[["StepTestState"], Awaitable[None]]


class PollConfig(BaseModel):
    """How the eventual-consistency waits poll the cluster."""

    tick_interval: float = Field(
        default_factory=lambda: settings.POLL_TICK_INTERVAL_SECONDS,
        gt=0,
        description="Seconds between condition checks",
    )
    timeout: float = Field(
        default_factory=lambda: settings.POLL_TIMEOUT_SECONDS,
        gt=0,
        description="Total seconds before the wait fails the test",
    )

    model_config = ConfigDict(frozen=True)


class _StepBase:
    __slots__ = ()

    def describe(self) -> str:
        return type(self).__name__


@dataclass(frozen=True, slots=True)
class WriteLineProtocol(_StepBase):
    """Write line protocol to the router; the write must succeed."""

    line_protocol: str

    def describe(self) -> str:
        return f"WriteLineProtocol({truncate_str_for_log(self.line_protocol, max_chars=120)!r})"


@dataclass(frozen=True, slots=True)
class WaitForReadable(_StepBase):
    """Wait for all previously written data to be readable."""


@dataclass(frozen=True, slots=True)
class WaitForPersisted(_StepBase):
    """Wait for all previously written data to be persisted."""


@dataclass(frozen=True, slots=True)
class WaitForPersistedAccordingToIngester(_StepBase):
    """
    Ask the ingester (not the querier) whether previously written data is
    persisted. For clusters where the querier doesn't know about the ingester.
    """


@dataclass(frozen=True, slots=True)
class RecordNumParquetFiles(_StepBase):
    """
    Snapshot how many Parquet files the catalog has for the namespace.

    Run this before a write, then use WaitForPersisted2 after it to observe
    persistence as an increase in that count.
    """


@dataclass(frozen=True, slots=True)
class WaitForPersisted2(_StepBase):
    """Wait for the catalog Parquet file count to grow past the last snapshot."""


@dataclass(frozen=True, slots=True)
class AssertNotPersisted(_StepBase):
    """Assert that no previously written data is persisted yet."""


@dataclass(frozen=True, slots=True)
class AssertLastNotPersisted(_StepBase):
    """Assert that the most recent write is not persisted yet."""


@dataclass(frozen=True, slots=True)
class Compact(_StepBase):
    """Run a compaction pass and wait for it to finish."""


@dataclass(frozen=True, slots=True)
class Query(_StepBase):
    """
    Run SQL and compare the rows (in any order) to ``expected``.

    Each expected row is either a ``"col=value col=value"`` string with the
    columns in the order the query returns them, or one line of a
    pretty-printed table.
    """

    sql: str
    expected: ExpectedRows

    def __post_init__(self) -> None:
        object.__setattr__(self, "expected", tuple(self.expected))

    def describe(self) -> str:
        return f"Query({preview_query_for_log(self.sql, max_chars=200)!r})"


@dataclass(frozen=True, slots=True)
class InfluxQLQuery(_StepBase):
    """Run InfluxQL and compare the rows (in any order) to ``expected``, as for Query."""

    query: str
    expected: ExpectedRows

    def __post_init__(self) -> None:
        object.__setattr__(self, "expected", tuple(self.expected))

    def describe(self) -> str:
        return f"InfluxQLQuery({preview_query_for_log(self.query, max_chars=200)!r})"


@dataclass(frozen=True, slots=True)
class QueryExpectingError(_StepBase):
    """Run SQL that must fail with ``expected_error_code`` and a message containing ``expected_message``."""

    sql: str
    expected_error_code: QueryErrorCode
    expected_message: str

    def describe(self) -> str:
        return (
            f"QueryExpectingError({preview_query_for_log(self.sql, max_chars=200)!r}, "
            f"{QueryErrorCode(self.expected_error_code).value})"
        )


@dataclass(frozen=True, slots=True)
class InfluxQLExpectingError(_StepBase):
    """InfluxQL flavour of QueryExpectingError."""

    query: str
    expected_error_code: QueryErrorCode
    expected_message: str

    def describe(self) -> str:
        return (
            f"InfluxQLExpectingError({preview_query_for_log(self.query, max_chars=200)!r}, "
            f"{QueryErrorCode(self.expected_error_code).value})"
        )


@dataclass(frozen=True, slots=True)
class VerifiedQuery(_StepBase):
    """
    Run SQL and hand the rows to ``verify``.

    ``verify`` is expected to raise on validation failure.
    """

    sql: str
    verify: QueryValidationFn

    def describe(self) -> str:
        return f"VerifiedQuery({preview_query_for_log(self.sql, max_chars=200)!r})"


@dataclass(frozen=True, slots=True)
class VerifiedMetrics(_StepBase):
    """
    Fetch the router's /metrics text and hand it, with the test state, to
    ``verify``. ``verify`` is expected to raise on validation failure.
    """

    verify: MetricsValidationFn


@dataclass(frozen=True, slots=True)
class Custom(_StepBase):
    """
    A one-off async step with full access to the test state.

    Example::

        async def check_tokens(state: StepTestState) -> None:
            assert len(state.write_tokens) == 2

        Custom(check_tokens)
    """

    func: CustomFn


Step = Union[
    WriteLineProtocol,
    WaitForReadable,
    WaitForPersisted,
    WaitForPersistedAccordingToIngester,
    RecordNumParquetFiles,
    WaitForPersisted2,
    AssertNotPersisted,
    AssertLastNotPersisted,
    Compact,
    Query,
    InfluxQLQuery,
    QueryExpectingError,
    InfluxQLExpectingError,
    VerifiedQuery,
    VerifiedMetrics,
    Custom,
]
