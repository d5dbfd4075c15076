"""Address helpers shared by coercion and capability providers."""
from __future__ import annotations

from . import config


def address_mask(bits: int | None = None) -> int:
    return (1 << (bits or config.ADDRESS_BITS)) - 1


def to_unsigned(value: int, *, bits: int | None = None) -> int:
    """Reinterpret *value* as an unsigned fixed-width address."""

    return int(value) & address_mask(bits)


def parse_address(text: str, *, bits: int | None = None) -> int:
    """Parse an address string.

    Accepts ``0x1234``, ``0X1234`` and bare ``1234``. Bare text is read as hex first
    and as decimal only when it is not valid hex, so ``"1234"`` means ``0x1234``.
    """

    value = text.strip() if isinstance(text, str) else ""
    if not value:
        raise ValueError("Address cannot be empty")

    digits = value[2:] if value.lower().startswith("0x") else value
    try:
        return to_unsigned(int(digits, 16), bits=bits)
    except ValueError:
        pass
    try:
        return to_unsigned(int(value, 10), bits=bits)
    except ValueError:
        raise ValueError(f"Invalid address format: {value}") from None


def format_address(value: int, *, bits: int | None = None) -> str:
    """Return a zero-padded hex string sized for the configured address width."""

    width = (bits or config.ADDRESS_BITS) // 4
    return f"0x{to_unsigned(value, bits=bits):0{width}X}"


__all__ = ["address_mask", "format_address", "parse_address", "to_unsigned"]
