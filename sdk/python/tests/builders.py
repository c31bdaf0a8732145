from dataclasses import replace
from typing import List, Sequence

from drips_sdk import (
    ConfigCodec,
    HashChainVerifier,
    HistoryEntry,
    ListChangedEvent,
    ReceiverCanonicalizer,
    ReceiverSeenEvent,
    StreamConfig,
    StreamReceiver,
)
from drips_sdk.constants import ZERO_HASH

TOKEN = "0x6B175474E89094C44Da98b954EedeAC495271d0F"


def cfg(amount: int = 1_000_000_000, stream_id: int = 1, start: int = 0, duration: int = 0) -> int:
    return ConfigCodec.encode(StreamConfig(stream_id, amount, start, duration))


def receiver(account_id: int, **kwargs) -> StreamReceiver:
    return StreamReceiver(account_id, cfg(**kwargs))


def list_event(
    account_id: int,
    receivers: Sequence[StreamReceiver],
    ts: int,
    balance: int = 10 ** 18,
    max_end: int = 0,
    order_key=None,
    disclose: bool = True,
    token: str = TOKEN,
) -> ListChangedEvent:
    canonical = ReceiverCanonicalizer.canonicalize_streams(receivers)
    list_hash = HashChainVerifier.hash_receivers(canonical)
    seen = tuple(ReceiverSeenEvent(list_hash, r) for r in canonical) if disclose else ()
    return ListChangedEvent(
        account_id=account_id,
        token_address=token,
        list_hash=list_hash,
        update_timestamp=ts,
        max_end=max_end,
        balance=balance,
        order_key=order_key,
        receivers_seen=seen,
    )


def with_history_hashes(events: Sequence[ListChangedEvent]) -> List[ListChangedEvent]:
    """Record the chained history hash on each event, in timestamp order"""
    out = []
    history_hash = ZERO_HASH
    for event in sorted(events, key=lambda e: e.update_timestamp):
        entry = HistoryEntry(event.list_hash, (), event.update_timestamp, event.max_end)
        history_hash = HashChainVerifier.chain_history(history_hash, entry)
        out.append(replace(event, history_hash=history_hash))
    return out

