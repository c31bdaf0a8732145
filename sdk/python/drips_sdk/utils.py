"""
Utility functions for Drips
"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from enum import IntEnum
from typing import Dict

from eth_utils import is_address

from .constants import AMT_PER_SEC_EXTRA_DECIMALS, AMT_PER_SEC_MULTIPLIER, DEFAULT_CYCLE_SECS
from .errors import InvalidArgumentError, RangeError

_NUMERIC = re.compile(r'^\d+$')


class TimeUnit(IntEnum):
    """Stream rate time units, in seconds"""
    SECOND = 1
    MINUTE = 60
    HOUR = 3600
    DAY = 86400
    WEEK = 604800
    MONTH = 2592000  # 30 days
    YEAR = 31536000  # 365 days


class Utils:
    """Helper utilities for Drips stream rates and identifiers"""

    @staticmethod
    def parse_stream_rate(amount: str, time_unit: TimeUnit, token_decimals: int) -> int:
        """
        Convert a human amount per time unit to the contract's amount per second.

        Digits beyond `token_decimals + AMT_PER_SEC_EXTRA_DECIMALS` are rounded
        half up before dividing by the time unit.

        Args:
            amount: Decimal string in token units, e.g. "100.5"
            time_unit: Time unit the amount is streamed over
            token_decimals: Decimals of the token

        Returns:
            Amount per second with AMT_PER_SEC_EXTRA_DECIMALS extra decimals,
            rounded down

        Example:
            >>> Utils.parse_stream_rate("1", TimeUnit.SECOND, 0)
            1000000000
        """
        try:
            value = Decimal(amount)
        except (InvalidOperation, TypeError, ValueError):
            raise InvalidArgumentError(f"Invalid amount: {amount!r}", {'operation': 'parse_stream_rate', 'amount': amount})

        if not value.is_finite() or value < 0:
            raise InvalidArgumentError(f"Invalid amount: {amount!r}", {'operation': 'parse_stream_rate', 'amount': amount})

        total_decimals = token_decimals + AMT_PER_SEC_EXTRA_DECIMALS
        with localcontext() as ctx:
            ctx.prec = 200
            scaled = value.scaleb(total_decimals).quantize(Decimal(1), rounding=ROUND_HALF_UP)
            return int(scaled) // int(time_unit)

    @staticmethod
    def format_stream_rate(amount_per_sec: int, time_unit: TimeUnit, token_decimals: int) -> str:
        """
        Format an amount per second as a human amount per time unit.

        Args:
            amount_per_sec: Amount per second with extra decimals
            time_unit: Time unit to display the rate in
            token_decimals: Decimals of the token

        Returns:
            Decimal string without trailing zeros
        """
        display = amount_per_sec * int(time_unit) // AMT_PER_SEC_MULTIPLIER
        whole, frac = divmod(display, 10 ** token_decimals)
        if frac == 0 or token_decimals == 0:
            return str(whole)
        return f"{whole}.{str(frac).rjust(token_decimals, '0').rstrip('0')}"

    @staticmethod
    def validate_stream_rate(amount_per_sec: int, cycle_secs: int = DEFAULT_CYCLE_SECS) -> None:
        """
        Reject rates streaming less than 1 wei per cycle.

        Raises:
            RangeError: if the rate is too low
        """
        wei_per_cycle = amount_per_sec * cycle_secs // AMT_PER_SEC_MULTIPLIER
        if wei_per_cycle < 1:
            raise RangeError(
                "Stream rate must be higher than 1 wei per cycle",
                {'operation': 'validate_stream_rate', 'amount_per_sec': amount_per_sec, 'wei_per_cycle': wei_per_cycle},
            )

    @staticmethod
    def encode_stream_id(sender_account_id: str, token_address: str, drip_id: str) -> str:
        """
        Build the indexer's stream identifier `<sender>-<token>-<dripId>`.

        Raises:
            InvalidArgumentError: non-numeric ids or invalid token address
        """
        sender_account_id, drip_id = str(sender_account_id), str(drip_id)
        if not (_NUMERIC.match(sender_account_id) and _NUMERIC.match(drip_id) and is_address(token_address)):
            raise InvalidArgumentError(
                "Invalid values",
                {
                    'operation': 'encode_stream_id',
                    'sender_account_id': sender_account_id,
                    'token_address': token_address,
                    'drip_id': drip_id,
                },
            )
        return f"{sender_account_id}-{token_address.lower()}-{drip_id}"

    @staticmethod
    def decode_stream_id(stream_id: str) -> Dict[str, str]:
        """
        Split a stream identifier into its parts.

        Returns:
            dict with 'sender_account_id', 'token_address' and 'drip_id'
        """
        parts = stream_id.split('-')
        if len(parts) != 3:
            raise InvalidArgumentError(
                "Invalid stream ID format",
                {'operation': 'decode_stream_id', 'stream_id': stream_id, 'parts': parts},
            )

        values = {
            'sender_account_id': parts[0],
            'token_address': parts[1].lower(),
            'drip_id': parts[2],
        }
        if not (_NUMERIC.match(values['sender_account_id']) and _NUMERIC.match(values['drip_id'])
                and is_address(values['token_address'])):
            raise InvalidArgumentError("Invalid stream ID", {'operation': 'decode_stream_id', 'stream_id': stream_id})
        return values
