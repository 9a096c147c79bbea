"""
Cluster connectors.
"""

from stepharness.connectors.cluster import (
    WRITE_TOKEN_HEADER,
    Connection,
    MiniCluster,
    get_write_token,
)

__all__ = [
    "WRITE_TOKEN_HEADER",
    "Connection",
    "MiniCluster",
    "get_write_token",
]
