"""
Drips Python SDK

Client-side accounting for the Drips streaming protocol.

Features:
- Stream config bit-packing matching the contracts
- Canonical receivers ordering and validation
- keccak256 receivers and history hashing
- History reconciliation from subgraph events
- Squeeze selection and proof assembly
"""

import logging

__version__ = "1.0.0"
__author__ = "Drips SDK Team"

from .client import SubgraphClient
from .codec import CURRENT_LAYOUT, LEGACY_LAYOUT, ConfigCodec, ConfigLayout
from .errors import (
    DripsError,
    InsufficientHistoryError,
    InvalidArgumentError,
    InvalidReceiverError,
    RangeError,
    ReconciliationError,
    SubgraphQueryError,
)
from .hashing import HashChainVerifier
from .history import HistoryReconciler
from .models import (
    HistoryEntry,
    ListChangedEvent,
    ReceiverListState,
    ReceiverSeenEvent,
    ReconciledHistory,
    SplitsReceiver,
    SqueezeProof,
    StreamConfig,
    StreamReceiver,
    StreamsState,
)
from .planner import ChainReader, EventSource, SqueezePlanner
from .receivers import ReceiverCanonicalizer
from .settings import DripsSettings
from .squeeze import CycleConfig, SqueezeSelector
from .utils import TimeUnit, Utils

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "SubgraphClient",
    "ConfigCodec",
    "ConfigLayout",
    "CURRENT_LAYOUT",
    "LEGACY_LAYOUT",
    "DripsError",
    "InsufficientHistoryError",
    "InvalidArgumentError",
    "InvalidReceiverError",
    "RangeError",
    "ReconciliationError",
    "SubgraphQueryError",
    "HashChainVerifier",
    "HistoryReconciler",
    "HistoryEntry",
    "ListChangedEvent",
    "ReceiverListState",
    "ReceiverSeenEvent",
    "ReconciledHistory",
    "SplitsReceiver",
    "SqueezeProof",
    "StreamConfig",
    "StreamReceiver",
    "StreamsState",
    "ChainReader",
    "EventSource",
    "SqueezePlanner",
    "ReceiverCanonicalizer",
    "DripsSettings",
    "CycleConfig",
    "SqueezeSelector",
    "TimeUnit",
    "Utils",
]
