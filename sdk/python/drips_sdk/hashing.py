"""
Hashing utilities matching the Drips contracts
"""

from typing import Iterable, Sequence

from eth_abi import encode
from eth_utils import keccak

from .constants import EMPTY_RECEIVERS_HASH
from .models import HistoryEntry, SplitsReceiver, StreamReceiver


class HashChainVerifier:
    """
    Receivers and history hashes, bit-for-bit with the contracts.

    Uses keccak256 over ABI encoding via eth-abi / eth-utils.
    """

    @staticmethod
    def hash_receivers(receivers: Sequence[StreamReceiver]) -> bytes:
        """
        Hash a canonical streams receivers list.

        Args:
            receivers: Receivers already in canonical order

        Returns:
            32-byte hash, EMPTY_RECEIVERS_HASH for an empty list

        Example:
            >>> HashChainVerifier.hash_receivers([]) == EMPTY_RECEIVERS_HASH
            True
        """
        if not receivers:
            return EMPTY_RECEIVERS_HASH
        payload = encode(
            ['(uint256,uint256)[]'],
            [[(r.account_id, r.config) for r in receivers]],
        )
        return keccak(payload)

    @staticmethod
    def hash_splits(receivers: Sequence[SplitsReceiver]) -> bytes:
        """Hash a canonical splits receivers list (zero hash when empty)"""
        if not receivers:
            return EMPTY_RECEIVERS_HASH
        payload = encode(
            ['(uint256,uint32)[]'],
            [[(r.account_id, r.weight) for r in receivers]],
        )
        return keccak(payload)

    @staticmethod
    def chain_history(previous_history_hash: bytes, entry: HistoryEntry) -> bytes:
        """
        Append one entry to a history hash.

        Args:
            previous_history_hash: History hash before the entry
            entry: Entry whose list hash, update time and max end are chained

        Returns:
            History hash after the entry
        """
        payload = encode(
            ['bytes32', 'bytes32', 'uint32', 'uint32'],
            [previous_history_hash, entry.list_hash, entry.update_timestamp, entry.max_end],
        )
        return keccak(payload)

    @staticmethod
    def replay_history(start_hash: bytes, entries: Iterable[HistoryEntry]) -> bytes:
        """Fold `chain_history` over `entries` starting from `start_hash`"""
        history_hash = start_hash
        for entry in entries:
            history_hash = HashChainVerifier.chain_history(history_hash, entry)
        return history_hash
