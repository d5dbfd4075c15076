import pytest

from toolhost.utils.address import format_address, parse_address, to_unsigned


@pytest.mark.parametrize(
    "text, expected",
    [("0x401000", 0x401000), ("0X10", 0x10), ("ff", 0xFF), ("1234", 0x1234), (" 0x1 ", 1)],
)
def test_parse_address_reads_hex_first(text: str, expected: int) -> None:
    assert parse_address(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "0xzz", "nope"])
def test_parse_address_rejects_bad_input(text: str) -> None:
    with pytest.raises(ValueError):
        parse_address(text)


def test_address_width_is_configurable() -> None:
    assert to_unsigned(-1, bits=32) == 0xFFFFFFFF
    assert parse_address("0x1ffffffff", bits=32) == 0xFFFFFFFF
    assert format_address(0x401000, bits=32) == "0x00401000"
    assert format_address(0x401000, bits=64) == "0x0000000000401000"
