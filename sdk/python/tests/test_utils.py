import pytest

from drips_sdk import InvalidArgumentError, RangeError, TimeUnit, Utils

from builders import TOKEN


def test_parse_stream_rate():
    assert Utils.parse_stream_rate("1", TimeUnit.SECOND, 0) == 1_000_000_000
    assert Utils.parse_stream_rate("86400", TimeUnit.DAY, 0) == 1_000_000_000
    assert Utils.parse_stream_rate("100", TimeUnit.MONTH, 18) == 100 * 10 ** 27 // 2592000
    assert Utils.parse_stream_rate("0.5", TimeUnit.SECOND, 6) == 500_000 * 10 ** 9


@pytest.mark.parametrize("amount", ["abc", "-1", "NaN"])
def test_parse_stream_rate_invalid(amount):
    with pytest.raises(InvalidArgumentError):
        Utils.parse_stream_rate(amount, TimeUnit.SECOND, 0)


def test_parse_stream_rate_rounds_extra_decimals():
    assert Utils.parse_stream_rate("0.0000000004", TimeUnit.SECOND, 0) == 0
    assert Utils.parse_stream_rate("0.0000000005", TimeUnit.SECOND, 0) == 1
    assert Utils.parse_stream_rate("1.00000000149", TimeUnit.SECOND, 0) == 1_000_000_001


def test_format_stream_rate():
    assert Utils.format_stream_rate(1_000_000_000, TimeUnit.HOUR, 0) == "3600"
    assert Utils.format_stream_rate(15 * 10 ** 9, TimeUnit.SECOND, 1) == "1.5"
    assert Utils.format_stream_rate(10 ** 9, TimeUnit.SECOND, 3) == "0.001"


def test_validate_stream_rate():
    Utils.validate_stream_rate(1654)
    with pytest.raises(RangeError):
        Utils.validate_stream_rate(1)


def test_stream_id_round_trip():
    stream_id = Utils.encode_stream_id("123", TOKEN, "7")
    assert stream_id == f"123-{TOKEN.lower()}-7"
    assert Utils.decode_stream_id(stream_id) == {
        "sender_account_id": "123",
        "token_address": TOKEN.lower(),
        "drip_id": "7",
    }


@pytest.mark.parametrize("args", [("x", TOKEN, "1"), ("1", "0x1234", "1"), ("1", TOKEN, "-1")])
def test_encode_stream_id_invalid(args):
    with pytest.raises(InvalidArgumentError):
        Utils.encode_stream_id(*args)


@pytest.mark.parametrize("stream_id", ["1-2", "1-notanaddress-2", f"a-{TOKEN}-1"])
def test_decode_stream_id_invalid(stream_id):
    with pytest.raises(InvalidArgumentError):
        Utils.decode_stream_id(stream_id)
