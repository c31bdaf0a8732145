"""
Reconstruction of streams receivers history from indexed events
"""

import logging
from collections import OrderedDict
from typing import Dict, Iterable, List, Sequence, Tuple

from .errors import InvalidReceiverError, ReconciliationError
from .hashing import HashChainVerifier
from .models import (
    ListChangedEvent,
    ReceiverListState,
    ReceiverSeenEvent,
    ReconciledHistory,
    StreamReceiver,
)
from .receivers import ReceiverCanonicalizer

logger = logging.getLogger(__name__)


def _sort_key(event: ListChangedEvent) -> Tuple[int, bool, int]:
    # Unkeyed events first at equal timestamps; sorted() keeps input order otherwise.
    return (event.update_timestamp, event.order_key is not None, event.order_key or 0)


class HistoryReconciler:
    """
    Rebuilds the full receivers lists a sender went through.

    The chain only discloses each receiver the first time a list hash is
    used, so a list reused later must be resolved from earlier events.
    Every resolved list is checked against its hash before it is returned.

    Example:
        >>> history = HistoryReconciler().reconcile(events)
        >>> history.latest.receivers
    """

    def reconcile(
        self,
        events: Iterable[ListChangedEvent],
        receivers_seen: Iterable[ReceiverSeenEvent] = (),
    ) -> ReconciledHistory:
        """
        Reconcile the events of one account/token pair.

        Args:
            events: List-changed events in any order
            receivers_seen: Receiver-seen events, in addition to the ones
                embedded in `events`

        Returns:
            ReconciledHistory with one state per event, oldest first

        Raises:
            ReconciliationError: events span several account/token pairs,
                or a resolved receivers list does not match its hash
        """
        ordered = sorted(events, key=_sort_key)
        if not ordered:
            return ReconciledHistory(account_id=None, token_address=None)

        account_id = ordered[0].account_id
        token_address = ordered[0].token_address
        for event in ordered:
            if event.account_id != account_id or event.token_address.lower() != token_address.lower():
                raise ReconciliationError(
                    "Events belong to more than one account/token pair",
                    {
                        'operation': 'reconcile',
                        'expected': (account_id, token_address),
                        'found': (event.account_id, event.token_address),
                    },
                )

        # Distinct hashes in first-occurrence order.
        seen_by_hash: Dict[bytes, List[StreamReceiver]] = OrderedDict()
        for event in ordered:
            seen_by_hash.setdefault(event.list_hash, [])

        for seen in self._all_receivers_seen(ordered, receivers_seen):
            if seen.list_hash in seen_by_hash:
                seen_by_hash[seen.list_hash].append(seen.receiver)

        resolved: Dict[bytes, Tuple[StreamReceiver, ...]] = {}
        for list_hash, receivers in seen_by_hash.items():
            resolved[list_hash] = self._verify(list_hash, receivers)
            logger.debug(
                "Verified receivers list %s (%d receivers), %d/%d resolved",
                list_hash.hex(), len(resolved[list_hash]), len(resolved), len(seen_by_hash),
            )

        states = tuple(
            ReceiverListState(
                list_hash=event.list_hash,
                receivers=resolved[event.list_hash],
                update_timestamp=event.update_timestamp,
                max_end=event.max_end,
                balance=event.balance,
                history_hash=event.history_hash,
                order_key=event.order_key,
            )
            for event in ordered
        )
        logger.debug("Reconciled %d states for account %s token %s", len(states), account_id, token_address)
        return ReconciledHistory(account_id=account_id, token_address=token_address, states=states)

    def reconcile_by_account(
        self,
        events: Iterable[ListChangedEvent],
        receivers_seen: Sequence[ReceiverSeenEvent] = (),
    ) -> Dict[Tuple[int, str], ReconciledHistory]:
        """
        Group events by account/token pair and reconcile each group.

        Keys use the lowercased token address.
        """
        groups: Dict[Tuple[int, str], List[ListChangedEvent]] = OrderedDict()
        for event in events:
            groups.setdefault((event.account_id, event.token_address.lower()), []).append(event)

        return {key: self.reconcile(group, receivers_seen) for key, group in groups.items()}

    @staticmethod
    def _all_receivers_seen(
        events: Sequence[ListChangedEvent],
        receivers_seen: Iterable[ReceiverSeenEvent],
    ) -> List[ReceiverSeenEvent]:
        collected = list(receivers_seen)
        for event in events:
            collected.extend(event.receivers_seen)
        return collected

    @staticmethod
    def _verify(list_hash: bytes, receivers: List[StreamReceiver]) -> Tuple[StreamReceiver, ...]:
        try:
            canonical = ReceiverCanonicalizer.canonicalize_streams(receivers)
        except InvalidReceiverError as exc:
            logger.warning("Receivers disclosed for %s are invalid: %s", list_hash.hex(), exc.message)
            raise ReconciliationError(
                f"Receivers disclosed for list {list_hash.hex()} are invalid: {exc.message}",
                {'operation': 'reconcile', 'list_hash': list_hash, 'cause': exc.meta},
            ) from exc

        computed = HashChainVerifier.hash_receivers(canonical)
        if computed != list_hash:
            logger.warning(
                "Receivers list %s hashes to %s, history is incomplete or corrupt",
                list_hash.hex(), computed.hex(),
            )
            raise ReconciliationError(
                f"Receivers disclosed for list {list_hash.hex()} hash to {computed.hex()}",
                {
                    'operation': 'reconcile',
                    'list_hash': list_hash,
                    'computed_hash': computed,
                    'receivers': canonical,
                },
            )
        return canonical
