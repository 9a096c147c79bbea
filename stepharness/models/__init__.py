"""
Data models for the step harness.

- Step variants (immutable dataclasses)
- PollConfig (polling parameters for eventual-consistency waits)
"""

from stepharness.models.steps import (
    AssertLastNotPersisted,
    AssertNotPersisted,
    Compact,
    Custom,
    CustomFn,
    ExpectedRows,
    InfluxQLExpectingError,
    InfluxQLQuery,
    MetricsValidationFn,
    PollConfig,
    Query,
    QueryExpectingError,
    QueryValidationFn,
    RecordNumParquetFiles,
    Row,
    Step,
    VerifiedMetrics,
    VerifiedQuery,
    WaitForPersisted,
    WaitForPersisted2,
    WaitForPersistedAccordingToIngester,
    WaitForReadable,
    WriteLineProtocol,
)

__all__ = [
    "AssertLastNotPersisted",
    "AssertNotPersisted",
    "Compact",
    "Custom",
    "CustomFn",
    "ExpectedRows",
    "InfluxQLExpectingError",
    "InfluxQLQuery",
    "MetricsValidationFn",
    "PollConfig",
    "Query",
    "QueryExpectingError",
    "QueryValidationFn",
    "RecordNumParquetFiles",
    "Row",
    "Step",
    "VerifiedMetrics",
    "VerifiedQuery",
    "WaitForPersisted",
    "WaitForPersisted2",
    "WaitForPersistedAccordingToIngester",
    "WaitForReadable",
    "WriteLineProtocol",
]
