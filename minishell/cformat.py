"""A small printf-style formatter supporting %c %s %d %i %u %x %X %p."""

from __future__ import annotations

_INT_BITS = 32
_LONG_BITS = 64


def _to_int32(value: int) -> int:
    value &= (1 << _INT_BITS) - 1
    if value >= 1 << (_INT_BITS - 1):
        value -= 1 << _INT_BITS
    return value


def _to_uint32(value: int) -> int:
    return value & ((1 << _INT_BITS) - 1)


def format_hex(number: int, conversion: str) -> str:
    """Format ``number`` as unsigned hexadecimal; ``'x'`` lowercase, else upper."""
    digits = format(number & ((1 << _LONG_BITS) - 1), "x")
    return digits if conversion == "x" else digits.upper()


def format_pointer(address: int | None) -> str:
    """Format an address as ``0x...``, or ``(nil)`` for a null address."""
    if not address:
        return "(nil)"
    return "0x" + format_hex(address, "x")


def _format_char(value: int | str) -> str:
    if isinstance(value, str):
        return value[:1]
    return chr(value & 0xFF)


def _format_one(conversion: str, args: list) -> str:
    if conversion not in "csdiuxXp":
        return conversion
    if not args:
        raise ValueError(f"not enough arguments for conversion %{conversion}")
    value = args.pop(0)
    if conversion == "c":
        return _format_char(value)
    if conversion == "s":
        return "(null)" if value is None else str(value)
    if conversion in "di":
        return str(_to_int32(int(value)))
    if conversion == "u":
        return str(_to_uint32(int(value)))
    if conversion in "xX":
        return format_hex(_to_uint32(int(value)), conversion)
    return format_pointer(value)


def format_printf(template: str, *args) -> str:
    """Expand ``template`` with ``args``; unknown conversions print themselves."""
    pending = list(args)
    pieces: list[str] = []
    chars = iter(template)
    for char in chars:
        if char != "%":
            pieces.append(char)
            continue
        conversion = next(chars, None)
        if conversion is None:
            pieces.append("\0")
            break
        pieces.append(_format_one(conversion, pending))
    return "".join(pieces)