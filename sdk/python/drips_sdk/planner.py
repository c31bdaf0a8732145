"""
Squeeze planning across all senders of a receiver
"""

import logging
from typing import Dict, List, Optional, Protocol

from .history import HistoryReconciler
from .models import ListChangedEvent, ReconciledHistory, SqueezeProof, StreamsState
from .squeeze import SqueezeSelector

logger = logging.getLogger(__name__)


class EventSource(Protocol):
    """Indexed events provider, e.g. SubgraphClient"""

    def get_streams_set_events(self, account_id: int, token_address: Optional[str] = None) -> List[ListChangedEvent]:
        ...

    def get_senders_streaming_to(self, receiver_id: int) -> List[int]:
        ...


class ChainReader(Protocol):
    """Reads the on-chain streams state used as verification checkpoint"""

    def streams_state(self, account_id: int, token_address: str) -> StreamsState:
        ...


class SqueezePlanner:
    """
    Produces every squeeze proof available to a receiver for one token.

    Args:
        event_source: Provider of list-changed events
        chain_reader: Provider of on-chain streams states
        selector: Squeeze selector (default: one week cycles)
        reconciler: History reconciler
    """

    def __init__(
        self,
        event_source: EventSource,
        chain_reader: ChainReader,
        selector: Optional[SqueezeSelector] = None,
        reconciler: Optional[HistoryReconciler] = None,
    ):
        self.event_source = event_source
        self.chain_reader = chain_reader
        self.selector = selector or SqueezeSelector()
        self.reconciler = reconciler or HistoryReconciler()

    def histories(self, receiver_id: int, token_address: str) -> Dict[int, ReconciledHistory]:
        """Reconciled history of every sender that ever streamed to `receiver_id`"""
        histories: Dict[int, ReconciledHistory] = {}
        for sender_id in self.event_source.get_senders_streaming_to(receiver_id):
            events = self.event_source.get_streams_set_events(sender_id, token_address)
            if events:
                histories[sender_id] = self.reconciler.reconcile(events)
        return histories

    def plan(self, receiver_id: int, token_address: str, now: Optional[int] = None) -> List[SqueezeProof]:
        """
        Build squeeze proofs for every squeezable sender.

        Args:
            receiver_id: Account squeezing the funds
            token_address: ERC-20 token
            now: Unix time (default: selector clock)

        Returns:
            One SqueezeProof per squeezable sender

        Raises:
            ReconciliationError: a sender's events are corrupt or incomplete
            InsufficientHistoryError: a sender's history does not reach the
                on-chain history hash
        """
        histories = self.histories(receiver_id, token_address)
        squeezable = self.selector.select_squeezable_senders(receiver_id, histories, now)

        proofs = []
        for sender_id in squeezable:
            history = histories[sender_id]
            state = self.chain_reader.streams_state(sender_id, token_address)
            checkpoint = self.selector.squeeze_checkpoint(history, now)
            proofs.append(
                self.selector.build_squeeze_proof(
                    receiver_id,
                    sender_id,
                    token_address,
                    history,
                    known_history_hash=checkpoint,
                    current_history_hash=state.history_hash,
                )
            )
        logger.debug("Planned %d squeezes for %s on %s", len(proofs), receiver_id, token_address)
        return proofs
