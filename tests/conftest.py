"""
Global pytest configuration and fixtures for stepharness tests.

This module provides:
- FakeCluster: an in-memory MiniCluster whose write visibility, durability,
  catalog and query answers are scripted by each test
- A fast PollConfig so wait steps time out in milliseconds
"""

from __future__ import annotations

import uuid
from typing import Any, Optional

import httpx
import pytest

from stepharness.connectors.cluster import WRITE_TOKEN_HEADER, Connection, MiniCluster
from stepharness.errors import ClusterError, QueryError
from stepharness.models.steps import PollConfig


# =============================================================================
# In-memory cluster
# =============================================================================


class FakeCluster(MiniCluster):
    """
    Scriptable stand-in for a running cluster.

    Writes always get tokens ``token-1``, ``token-2``, ... Tokens are neither
    readable nor persisted until a test calls ``mark_readable`` /
    ``mark_persisted``; ``after_checks`` makes the first N checks answer False.
    """

    def __init__(self) -> None:
        super().__init__(
            org_id=f"org{uuid.uuid4().hex[:8]}",
            bucket_id="bucket",
            router_http_base="http://router.test",
        )
        self.written: list[str] = []
        self.write_status = 204
        self.compactions = 0
        self.compaction_error: Optional[Exception] = None
        self.files_per_compaction = 1
        self.parquet_files = 0
        self.parquet_file_counts: Optional[list[int]] = None
        self.catalog_error: Optional[Exception] = None
        self.sql_results: dict[str, Any] = {}
        self.influxql_results: dict[str, Any] = {}
        self.metrics_text = ""
        self.checks: list[tuple[str, str, Connection]] = []
        self._ready: dict[tuple[str, Connection], dict[str, int]] = {}

    def mark_readable(
        self,
        token: str,
        connection: Connection = Connection.QUERIER,
        after_checks: int = 0,
    ) -> None:
        self._ready.setdefault(("readable", connection), {})[token] = after_checks

    def mark_persisted(
        self,
        token: str,
        connection: Connection = Connection.QUERIER,
        after_checks: int = 0,
    ) -> None:
        self._ready.setdefault(("persisted", connection), {})[token] = after_checks

    def _check(self, kind: str, token: str, connection: Connection) -> bool:
        self.checks.append((kind, token, connection))
        pending = self._ready.get((kind, connection), {})
        if token not in pending:
            return False
        if pending[token] > 0:
            pending[token] -= 1
            return False
        return True

    async def write_line_protocol(self, line_protocol: str) -> httpx.Response:
        self.written.append(line_protocol)
        if self.write_status != 204:
            return httpx.Response(self.write_status, text="write rejected")
        token = f"token-{len(self.written)}"
        return httpx.Response(204, headers={WRITE_TOKEN_HEADER: token})

    async def fetch_metrics_text(self) -> str:
        return self.metrics_text

    async def token_is_readable(self, write_token: str, connection: Connection) -> bool:
        return self._check("readable", write_token, connection)

    async def token_is_persisted(self, write_token: str, connection: Connection) -> bool:
        return self._check("persisted", write_token, connection)

    async def num_parquet_files(self) -> int:
        if self.catalog_error is not None:
            raise self.catalog_error
        if self.parquet_file_counts:
            if len(self.parquet_file_counts) > 1:
                return self.parquet_file_counts.pop(0)
            return self.parquet_file_counts[0]
        return self.parquet_files

    async def run_compaction(self) -> None:
        if self.compaction_error is not None:
            raise self.compaction_error
        self.compactions += 1
        self.parquet_files += self.files_per_compaction

    async def run_sql(self, sql: str) -> Any:
        return self._answer(self.sql_results, sql)

    async def run_influxql(self, query: str) -> Any:
        return self._answer(self.influxql_results, query)

    @staticmethod
    def _answer(results: dict[str, Any], query: str) -> Any:
        if query not in results:
            raise ClusterError("query", f"no scripted result for {query!r}")
        result = results[query]
        if isinstance(result, QueryError):
            raise result
        return result


@pytest.fixture
def cluster() -> FakeCluster:
    """A fresh in-memory cluster per test."""
    return FakeCluster()


@pytest.fixture
def fast_poll() -> PollConfig:
    """Polling fast enough for unit tests: 10ms ticks, 200ms budget."""
    return PollConfig(tick_interval=0.01, timeout=0.2)
