"""
Stream configuration bit-packing
"""

from dataclasses import dataclass
from typing import Dict

from .errors import RangeError
from .models import StreamConfig


@dataclass(frozen=True)
class ConfigLayout:
    """Bit widths of a packed stream config, listed from the high bits down"""
    name: str
    stream_id_bits: int
    amount_per_sec_bits: int
    start_bits: int = 32
    duration_bits: int = 32

    @property
    def total_bits(self) -> int:
        return self.stream_id_bits + self.amount_per_sec_bits + self.start_bits + self.duration_bits

    def limits(self) -> Dict[str, int]:
        return {
            'stream_id': (1 << self.stream_id_bits) - 1,
            'amount_per_sec': (1 << self.amount_per_sec_bits) - 1,
            'start': (1 << self.start_bits) - 1,
            'duration': (1 << self.duration_bits) - 1,
        }


# uint256: streamId(32) | amtPerSec(160) | start(32) | duration(32)
CURRENT_LAYOUT = ConfigLayout('current', stream_id_bits=32, amount_per_sec_bits=160)
# uint192 used by the first DripsHub deployments, without a stream id
LEGACY_LAYOUT = ConfigLayout('legacy', stream_id_bits=0, amount_per_sec_bits=128)


class ConfigCodec:
    """
    Packs stream configurations into the integer the contracts store.

    Example:
        >>> packed = ConfigCodec.encode(StreamConfig(7, 3_000_000_000))
        >>> ConfigCodec.decode(packed).amount_per_sec
        3000000000
    """

    @staticmethod
    def validate(config: StreamConfig, layout: ConfigLayout = CURRENT_LAYOUT) -> None:
        """
        Check every field of `config` against `layout`.

        Raises:
            RangeError: a field is negative or overflows its width, or the
                amount per second is zero
        """
        if config.amount_per_sec == 0:
            raise RangeError(
                "'amount_per_sec' must not be zero",
                {'operation': 'validate', 'field': 'amount_per_sec', 'value': 0, 'layout': layout.name},
            )
        for name, max_value in layout.limits().items():
            value = getattr(config, name)
            if value < 0 or value > max_value:
                raise RangeError(
                    f"'{name}' must be in [0, {max_value}], got {value}",
                    {'operation': 'validate', 'field': name, 'value': value, 'layout': layout.name},
                )

    @staticmethod
    def encode(config: StreamConfig, layout: ConfigLayout = CURRENT_LAYOUT) -> int:
        """
        Encode a stream configuration.

        Args:
            config: Configuration to pack
            layout: Bit layout (default: current uint256 layout)

        Returns:
            Packed configuration

        Raises:
            RangeError: see `validate`
        """
        ConfigCodec.validate(config, layout)

        packed = config.stream_id
        packed = (packed << layout.amount_per_sec_bits) | config.amount_per_sec
        packed = (packed << layout.start_bits) | config.start
        packed = (packed << layout.duration_bits) | config.duration
        return packed

    @staticmethod
    def decode(packed: int, layout: ConfigLayout = CURRENT_LAYOUT) -> StreamConfig:
        """
        Decode a packed stream configuration.

        Args:
            packed: Packed configuration
            layout: Bit layout (default: current uint256 layout)

        Returns:
            StreamConfig object

        Raises:
            RangeError: `packed` does not fit the layout or carries a zero rate
        """
        if packed < 0 or packed >> layout.total_bits:
            raise RangeError(
                f"packed config does not fit in {layout.total_bits} bits",
                {'operation': 'decode', 'value': packed, 'layout': layout.name},
            )

        duration = packed & ((1 << layout.duration_bits) - 1)
        packed >>= layout.duration_bits
        start = packed & ((1 << layout.start_bits) - 1)
        packed >>= layout.start_bits
        amount_per_sec = packed & ((1 << layout.amount_per_sec_bits) - 1)
        stream_id = packed >> layout.amount_per_sec_bits

        config = StreamConfig(
            stream_id=stream_id,
            amount_per_sec=amount_per_sec,
            start=start,
            duration=duration,
        )
        ConfigCodec.validate(config, layout)
        return config

    @staticmethod
    def encode_legacy(config: StreamConfig) -> int:
        """Encode into the legacy uint192 layout (stream id must be 0)"""
        return ConfigCodec.encode(config, LEGACY_LAYOUT)

    @staticmethod
    def decode_legacy(packed: int) -> StreamConfig:
        """Decode the legacy uint192 layout"""
        return ConfigCodec.decode(packed, LEGACY_LAYOUT)

    @staticmethod
    def amount_per_sec(packed: int) -> int:
        """Raw amount per second of a packed config without validation"""
        layout = CURRENT_LAYOUT
        return (packed >> (layout.start_bits + layout.duration_bits)) & ((1 << layout.amount_per_sec_bits) - 1)
