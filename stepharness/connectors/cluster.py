"""
Mini Cluster Connector

The step engine's only view of the system under test. Writes and metrics go
over the router's HTTP API and are implemented here with httpx; everything
else (token status, catalog, compaction, queries) depends on how a given
cluster is deployed and is left to subclasses.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional, Union

import httpx

from stepharness.config import settings
from stepharness.core.checks import QueryResult
from stepharness.core.helpers import truncate_str_for_log
from stepharness.errors import ClusterError, QueryError

logger = logging.getLogger(__name__)

WRITE_TOKEN_HEADER = "X-IOx-Write-Token"


class Connection(str, Enum):
    """Which component answers a write-token status question."""

    QUERIER = "querier"
    INGESTER = "ingester"


def get_write_token(response: httpx.Response) -> str:
    """Extract the write token from a successful router write response."""
    token = response.headers.get(WRITE_TOKEN_HEADER)
    if not token:
        raise ClusterError(
            "write",
            f"response has no {WRITE_TOKEN_HEADER} header",
            status_code=response.status_code,
        )
    return token


class MiniCluster(ABC):
    """
    Handle to a running cluster.

    The namespace is ``{org_id}_{bucket_id}``, matching how the router maps
    v2 write API org/bucket pairs onto namespaces.
    """

    def __init__(
        self,
        org_id: str,
        bucket_id: str,
        router_http_base: Optional[str] = None,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        http_timeout: Optional[float] = None,
    ) -> None:
        self.org_id = org_id
        self.bucket_id = bucket_id
        self._router_http_base = (router_http_base or settings.ROUTER_HTTP_BASE).rstrip("/")
        self._http_timeout = (
            settings.HTTP_TIMEOUT_SECONDS if http_timeout is None else http_timeout
        )
        self._client = http_client
        self._owns_client = http_client is None

    @property
    def namespace(self) -> str:
        return f"{self.org_id}_{self.bucket_id}"

    @property
    def router_http_base(self) -> str:
        return self._router_http_base

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._http_timeout)
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client if this cluster created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "MiniCluster":
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()

    # -------------------------------------------------------------------------
    # Router HTTP API
    # -------------------------------------------------------------------------

    async def write_line_protocol(self, line_protocol: str) -> httpx.Response:
        """
        POST line protocol to the router's v2 write API.

        The response is returned as-is; callers decide what status counts as
        success. Transport failures raise ClusterError.
        """
        url = f"{self._router_http_base}/api/v2/write"
        try:
            return await self.client.post(
                url,
                params={"org": self.org_id, "bucket": self.bucket_id},
                content=line_protocol.encode("utf-8"),
            )
        except httpx.HTTPError as e:
            logger.error(
                "Write to %s failed: %s (payload: %s)",
                url,
                e,
                truncate_str_for_log(line_protocol, max_chars=200),
            )
            raise ClusterError("write", str(e)) from e

    async def fetch_metrics_text(self) -> str:
        """GET the router's Prometheus metrics text."""
        url = f"{self._router_http_base}/metrics"
        try:
            response = await self.client.get(url)
        except httpx.HTTPError as e:
            raise ClusterError("fetch metrics", str(e)) from e
        if response.status_code >= 400:
            raise ClusterError(
                "fetch metrics",
                response.text or f"HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return response.text

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @abstractmethod
    async def run_sql(self, sql: str) -> QueryResult:
        """Run SQL against the namespace. Raises QueryError if the query fails."""

    @abstractmethod
    async def run_influxql(self, query: str) -> QueryResult:
        """Run InfluxQL against the namespace. Raises QueryError if the query fails."""

    async def try_run_sql(self, sql: str) -> Union[QueryResult, QueryError]:
        """Like run_sql, but a QueryError is returned instead of raised."""
        try:
            return await self.run_sql(sql)
        except QueryError as e:
            return e

    async def try_run_influxql(self, query: str) -> Union[QueryResult, QueryError]:
        """Like run_influxql, but a QueryError is returned instead of raised."""
        try:
            return await self.run_influxql(query)
        except QueryError as e:
            return e

    # -------------------------------------------------------------------------
    # Write token status, catalog and compaction
    # -------------------------------------------------------------------------

    @abstractmethod
    async def token_is_readable(self, write_token: str, connection: Connection) -> bool:
        """Whether the data behind ``write_token`` is visible to queries."""

    @abstractmethod
    async def token_is_persisted(self, write_token: str, connection: Connection) -> bool:
        """Whether the data behind ``write_token`` is durable."""

    @abstractmethod
    async def num_parquet_files(self) -> int:
        """How many Parquet files the catalog lists for the namespace."""

    @abstractmethod
    async def run_compaction(self) -> None:
        """Run a compaction pass to completion. Raises ClusterError on failure."""
