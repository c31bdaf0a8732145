"""
Data models for Drips SDK
"""

from dataclasses import dataclass, field
from typing import Any, List, Literal, Optional, Tuple

from .constants import ZERO_HASH


@dataclass(frozen=True)
class StreamConfig:
    """Unpacked stream configuration"""
    stream_id: int
    amount_per_sec: int
    start: int = 0
    duration: int = 0


@dataclass(frozen=True, order=True)
class StreamReceiver:
    """Streams receiver as stored on chain (config is the packed integer)"""
    account_id: int
    config: int


@dataclass(frozen=True, order=True)
class SplitsReceiver:
    """Splits receiver as stored on chain"""
    account_id: int
    weight: int


@dataclass(frozen=True)
class ReceiverSeenEvent:
    """First disclosure of a receiver belonging to a receivers list"""
    list_hash: bytes
    receiver: StreamReceiver


@dataclass(frozen=True)
class ListChangedEvent:
    """
    Sender updated its streams receivers list for one token.

    `history_hash` is the history hash recorded right after this update and
    `order_key` disambiguates updates sharing a block timestamp (log index).
    """
    account_id: int
    token_address: str
    list_hash: bytes
    update_timestamp: int
    max_end: int
    balance: int
    history_hash: Optional[bytes] = None
    order_key: Optional[int] = None
    receivers_seen: Tuple[ReceiverSeenEvent, ...] = ()


@dataclass(frozen=True)
class HistoryEntry:
    """One link of a streams history; empty receivers hide the entry"""
    list_hash: bytes
    receivers: Tuple[StreamReceiver, ...]
    update_timestamp: int
    max_end: int

    @property
    def hidden(self) -> bool:
        return not self.receivers

    def as_contract_args(self) -> Tuple[bytes, List[Tuple[int, int]], int, int]:
        """
        Render the `StreamsHistory` struct expected by `squeezeStreams`.

        The contract recomputes the hash from disclosed receivers and
        rejects entries carrying both, so the hash is zeroed for them.
        """
        if self.receivers:
            return (
                ZERO_HASH,
                [(r.account_id, r.config) for r in self.receivers],
                self.update_timestamp,
                self.max_end,
            )
        return (self.list_hash, [], self.update_timestamp, self.max_end)


@dataclass(frozen=True)
class ReceiverListState:
    """Full receivers list in effect from `update_timestamp` on"""
    list_hash: bytes
    receivers: Tuple[StreamReceiver, ...]
    update_timestamp: int
    max_end: int
    balance: int = 0
    history_hash: Optional[bytes] = None
    order_key: Optional[int] = None

    def to_history_entry(self, hide: bool = False) -> HistoryEntry:
        return HistoryEntry(
            list_hash=self.list_hash,
            receivers=() if hide else self.receivers,
            update_timestamp=self.update_timestamp,
            max_end=self.max_end,
        )


@dataclass(frozen=True)
class ReconciledHistory:
    """Verified chronological receivers-list states of one account/token"""
    account_id: Optional[int]
    token_address: Optional[str]
    states: Tuple[ReceiverListState, ...] = ()
    status: Literal['reconciled'] = 'reconciled'

    @property
    def latest(self) -> Optional[ReceiverListState]:
        return self.states[-1] if self.states else None

    def history_entries(self) -> List[HistoryEntry]:
        return [s.to_history_entry() for s in self.states]


@dataclass(frozen=True)
class SqueezeProof:
    """Arguments of a single `squeezeStreams` call"""
    account_id: int
    token_address: str
    sender_id: int
    history_hash: bytes
    history: Tuple[HistoryEntry, ...] = field(default_factory=tuple)

    def as_contract_args(self) -> Tuple[Any, ...]:
        return (
            self.account_id,
            self.token_address,
            self.sender_id,
            self.history_hash,
            [entry.as_contract_args() for entry in self.history],
        )


@dataclass(frozen=True)
class StreamsState:
    """On-chain streams state of an account for one token"""
    list_hash: bytes
    history_hash: bytes
    update_time: int
    balance: int
    max_end: int
