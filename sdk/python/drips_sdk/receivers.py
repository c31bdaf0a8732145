"""
Canonical ordering and validation of receivers lists
"""

from typing import Iterable, List, Tuple

from .codec import CURRENT_LAYOUT, ConfigCodec
from .constants import MAX_SPLITS_RECEIVERS, MAX_STREAMS_RECEIVERS, TOTAL_SPLITS_WEIGHT
from .errors import InvalidReceiverError
from .models import SplitsReceiver, StreamReceiver


def _unique(receivers: Iterable) -> List:
    seen = set()
    out = []
    for receiver in receivers:
        if receiver not in seen:
            seen.add(receiver)
            out.append(receiver)
    return out


class ReceiverCanonicalizer:
    """
    Orders receivers lists exactly as the contracts hash them.

    The contracts require streams receivers sorted by account id then by
    packed config, and splits receivers strictly sorted by account id.
    Any other order hashes differently and the transaction reverts.
    """

    @staticmethod
    def canonicalize_streams(receivers: Iterable[StreamReceiver]) -> Tuple[StreamReceiver, ...]:
        """
        Sort and deduplicate streams receivers.

        Args:
            receivers: Streams receivers in any order

        Returns:
            Receivers sorted by (account_id, config), exact duplicates removed

        Raises:
            InvalidReceiverError: more than MAX_STREAMS_RECEIVERS receivers,
                a zero amount per second or a malformed config
        """
        unique = _unique(receivers)

        if len(unique) > MAX_STREAMS_RECEIVERS:
            raise InvalidReceiverError(
                f"Too many stream receivers: {len(unique)}. Maximum is {MAX_STREAMS_RECEIVERS}",
                {'operation': 'canonicalize_streams', 'count': len(unique)},
            )

        for receiver in unique:
            if receiver.config < 0 or receiver.config >> CURRENT_LAYOUT.total_bits:
                raise InvalidReceiverError(
                    f"Stream receiver {receiver.account_id} has a malformed config",
                    {'operation': 'canonicalize_streams', 'receiver': receiver},
                )
            if ConfigCodec.amount_per_sec(receiver.config) == 0:
                raise InvalidReceiverError(
                    f"Stream receiver {receiver.account_id} has 0 amount per second",
                    {'operation': 'canonicalize_streams', 'receiver': receiver},
                )

        return tuple(sorted(unique, key=lambda r: (r.account_id, r.config)))

    @staticmethod
    def canonicalize_splits(receivers: Iterable[SplitsReceiver]) -> Tuple[SplitsReceiver, ...]:
        """
        Sort and deduplicate splits receivers.

        The total weight is not checked here, see
        `validate_splits_for_submission`.

        Raises:
            InvalidReceiverError: more than MAX_SPLITS_RECEIVERS receivers,
                a weight outside (0, TOTAL_SPLITS_WEIGHT] or one account
                listed with two different weights
        """
        unique = _unique(receivers)

        if len(unique) > MAX_SPLITS_RECEIVERS:
            raise InvalidReceiverError(
                f"Too many splits receivers: {len(unique)}. Maximum is {MAX_SPLITS_RECEIVERS}",
                {'operation': 'canonicalize_splits', 'count': len(unique)},
            )

        invalid = [r for r in unique if r.weight <= 0 or r.weight > TOTAL_SPLITS_WEIGHT]
        if invalid:
            raise InvalidReceiverError(
                f"Invalid split receiver weights: {', '.join(str(r.account_id) for r in invalid)}",
                {'operation': 'canonicalize_splits', 'receivers': invalid},
            )

        ordered = sorted(unique, key=lambda r: r.account_id)
        for prev, curr in zip(ordered, ordered[1:]):
            if prev.account_id == curr.account_id:
                raise InvalidReceiverError(
                    f"Duplicate splits receiver with different weights: {curr.account_id}",
                    {'operation': 'canonicalize_splits', 'account_id': curr.account_id},
                )

        return tuple(ordered)

    @staticmethod
    def validate_splits_for_submission(receivers: Iterable[SplitsReceiver]) -> Tuple[SplitsReceiver, ...]:
        """
        Canonicalize splits receivers and check they split the whole balance.

        An empty list clears the splits configuration and is accepted.

        Raises:
            InvalidReceiverError: see `canonicalize_splits`, or the weights do
                not sum to TOTAL_SPLITS_WEIGHT
        """
        ordered = ReceiverCanonicalizer.canonicalize_splits(receivers)
        if not ordered:
            return ordered

        total = sum(r.weight for r in ordered)
        if total != TOTAL_SPLITS_WEIGHT:
            raise InvalidReceiverError(
                f"Total weight must be exactly {TOTAL_SPLITS_WEIGHT}, but got {total}",
                {'operation': 'validate_splits_for_submission', 'total_weight': total},
            )
        return ordered
