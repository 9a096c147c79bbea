"""
stepharness - sequential end-to-end step tests for an eventually-consistent
time-series cluster.

A test is a list of steps (write, wait, query, compact, check metrics, custom
logic) run in order against a MiniCluster by StepTest.
"""

from stepharness.connectors.cluster import Connection, MiniCluster, get_write_token
from stepharness.core.poller import wait_until
from stepharness.core.step_test import StepTest, StepTestState
from stepharness.errors import (
    ClusterError,
    ExpectationError,
    PollTimeoutError,
    PreconditionError,
    QueryError,
    QueryErrorCode,
    StepHarnessError,
)
from stepharness.models.steps import (
    AssertLastNotPersisted,
    AssertNotPersisted,
    Compact,
    Custom,
    InfluxQLExpectingError,
    InfluxQLQuery,
    PollConfig,
    Query,
    QueryExpectingError,
    RecordNumParquetFiles,
    Step,
    VerifiedMetrics,
    VerifiedQuery,
    WaitForPersisted,
    WaitForPersisted2,
    WaitForPersistedAccordingToIngester,
    WaitForReadable,
    WriteLineProtocol,
)

__version__ = "0.1.0"

__all__ = [
    "AssertLastNotPersisted",
    "AssertNotPersisted",
    "ClusterError",
    "Compact",
    "Connection",
    "Custom",
    "ExpectationError",
    "InfluxQLExpectingError",
    "InfluxQLQuery",
    "MiniCluster",
    "PollConfig",
    "PollTimeoutError",
    "PreconditionError",
    "Query",
    "QueryError",
    "QueryErrorCode",
    "QueryExpectingError",
    "RecordNumParquetFiles",
    "Step",
    "StepHarnessError",
    "StepTest",
    "StepTestState",
    "VerifiedMetrics",
    "VerifiedQuery",
    "WaitForPersisted",
    "WaitForPersisted2",
    "WaitForPersistedAccordingToIngester",
    "WaitForReadable",
    "WriteLineProtocol",
    "get_write_token",
    "wait_until",
]
