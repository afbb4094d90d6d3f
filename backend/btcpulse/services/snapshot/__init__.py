"""
Snapshot Service

CONTRACT:
    Input:  SnapshotRequest
    Output: MarketSnapshot

Orchestrates price, history and derivatives acquisition, the indicator
engine and the fallback merge into one dashboard payload.
"""

from btcpulse.services.snapshot.merger import SnapshotMerger
from btcpulse.services.snapshot.service import SnapshotService, get_snapshot_service

__all__ = [
    "SnapshotMerger",
    "SnapshotService",
    "get_snapshot_service",
]
