"""
Selection of squeezable senders and squeeze proof assembly
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .codec import ConfigCodec
from .constants import DEFAULT_CYCLE_SECS, ZERO_HASH
from .errors import InsufficientHistoryError, InvalidArgumentError
from .hashing import HashChainVerifier
from .models import ReceiverListState, ReconciledHistory, SqueezeProof
from .settings import DripsSettings

logger = logging.getLogger(__name__)

History = Union[ReconciledHistory, Sequence[ReceiverListState]]


def _states(history: History) -> Tuple[ReceiverListState, ...]:
    if isinstance(history, ReconciledHistory):
        return history.states
    return tuple(history)


@dataclass(frozen=True)
class CycleConfig:
    """Settlement cycle of a deployment"""
    cycle_secs: int = DEFAULT_CYCLE_SECS

    def __post_init__(self):
        if self.cycle_secs <= 0:
            raise InvalidArgumentError(
                f"cycle_secs must be positive, got {self.cycle_secs}",
                {'operation': 'CycleConfig', 'cycle_secs': self.cycle_secs},
            )

    @staticmethod
    def from_settings(settings: DripsSettings) -> "CycleConfig":
        return CycleConfig(cycle_secs=settings.cycle_secs)

    def current_cycle_start(self, now: int) -> int:
        return now - now % self.cycle_secs

    def in_open_cycle(self, timestamp: int, now: int) -> bool:
        """True if `timestamp` is strictly after the current cycle start and not in the future"""
        return self.current_cycle_start(now) < timestamp <= now


class SqueezeSelector:
    """
    Finds senders whose streams to a receiver can be squeezed in the
    currently open cycle, and builds the proofs to squeeze them.

    Args:
        cycle: Cycle configuration (default: one week)
        clock: Returns the current unix time, used when `now` is omitted
    """

    def __init__(self, cycle: Optional[CycleConfig] = None, clock: Callable[[], float] = time.time):
        self.cycle = cycle or CycleConfig()
        self.clock = clock

    def _now(self, now: Optional[int]) -> int:
        return int(self.clock()) if now is None else now

    @staticmethod
    def streams_to(state: ReceiverListState, receiver_id: int) -> bool:
        """True if `state` streams to `receiver_id` at a non-zero rate"""
        return any(
            r.account_id == receiver_id and ConfigCodec.amount_per_sec(r.config) > 0
            for r in state.receivers
        )

    def qualifying_states(self, receiver_id: int, history: History, now: Optional[int] = None) -> List[ReceiverListState]:
        """
        States of `history` that make funds squeezable for `receiver_id`.

        A state qualifies when it streams to the receiver, the sender still
        had a balance, and it was set inside the open cycle.
        """
        now = self._now(now)
        return [
            state for state in _states(history)
            if self.streams_to(state, receiver_id)
            and state.balance > 0
            and self.cycle.in_open_cycle(state.update_timestamp, now)
        ]

    def select_squeezable_senders(
        self,
        receiver_id: int,
        candidate_senders: Mapping[int, History],
        now: Optional[int] = None,
    ) -> Dict[int, List[ReceiverListState]]:
        """
        Filter candidate senders down to the squeezable ones.

        Args:
            receiver_id: Account receiving the streams
            candidate_senders: Reconciled history of each candidate sender
                for a single token
            now: Unix time (default: clock)

        Returns:
            dict of sender id -> qualifying states, squeezable senders only
        """
        now = self._now(now)
        selected: Dict[int, List[ReceiverListState]] = {}
        for sender_id, history in candidate_senders.items():
            states = self.qualifying_states(receiver_id, history, now)
            if states:
                selected[sender_id] = states
            else:
                logger.debug("Sender %s has nothing squeezable for %s", sender_id, receiver_id)
        return selected

    def squeeze_checkpoint(self, history: History, now: Optional[int] = None) -> bytes:
        """
        History hash recorded right before the state in effect when the open
        cycle started.

        A proof starting from this hash opens with that state and covers
        the whole open cycle. Uses the hash recorded by the preceding state,
        replaying from the empty history when it was not recorded.

        Returns:
            32-byte history hash, ZERO_HASH if the state in effect at the
            cycle start is the first one or the whole history is inside the
            open cycle
        """
        states = _states(history)
        cycle_start = self.cycle.current_cycle_start(self._now(now))

        in_effect = -1
        for i, state in enumerate(states):
            if state.update_timestamp <= cycle_start:
                in_effect = i
        if in_effect <= 0:
            return ZERO_HASH
        previous = states[in_effect - 1]
        if previous.history_hash is not None:
            return previous.history_hash
        return HashChainVerifier.replay_history(ZERO_HASH, (s.to_history_entry() for s in states[:in_effect]))

    def build_squeeze_proof(
        self,
        receiver_id: int,
        sender_id: int,
        token_address: str,
        history: History,
        known_history_hash: bytes,
        current_history_hash: bytes,
    ) -> SqueezeProof:
        """
        Build the shortest squeeze proof for `sender_id`'s history.

        Args:
            receiver_id: Account squeezing the funds
            sender_id: Account streaming the funds
            token_address: ERC-20 token
            history: Reconciled history of the sender for the token
            known_history_hash: History hash the proof starts from
            current_history_hash: Sender's history hash read from the chain

        Returns:
            SqueezeProof whose entries not streaming to the receiver are hidden;
            an empty proof when nothing changed since `known_history_hash`

        Raises:
            InsufficientHistoryError: no trailing suffix of `history` chains
                from `known_history_hash` to `current_history_hash`
        """
        states = _states(history)

        for size in range(len(states) + 1):
            suffix = states[len(states) - size:]
            replayed = HashChainVerifier.replay_history(
                known_history_hash, (s.to_history_entry() for s in suffix)
            )
            if replayed != current_history_hash:
                continue

            entries = tuple(
                s.to_history_entry(hide=not self.streams_to(s, receiver_id)) for s in suffix
            )
            logger.debug(
                "Squeeze proof for sender %s -> %s uses %d of %d states",
                sender_id, receiver_id, size, len(states),
            )
            return SqueezeProof(
                account_id=receiver_id,
                token_address=token_address,
                sender_id=sender_id,
                history_hash=known_history_hash,
                history=entries,
            )

        raise InsufficientHistoryError(
            f"No history suffix of sender {sender_id} chains to the on-chain history hash",
            {
                'operation': 'build_squeeze_proof',
                'sender_id': sender_id,
                'token_address': token_address,
                'known_history_hash': known_history_hash,
                'current_history_hash': current_history_hash,
                'states': len(states),
            },
        )
