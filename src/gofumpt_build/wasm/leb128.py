"""LEB128 integer encoding used throughout the WebAssembly binary format."""

from __future__ import annotations

from gofumpt_build.errors import WasmDecodeError


def encode_unsigned(value: int) -> bytes:
    """Encode a non-negative integer as unsigned LEB128.

    Example:
        >>> encode_unsigned(624485).hex()
        'e58e26'
    """
    if value < 0:
        raise ValueError(f"Cannot encode negative value {value} as unsigned LEB128")

    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def decode_unsigned(data: bytes, offset: int) -> tuple[int, int]:
    """Decode an unsigned LEB128 integer.

    Args:
        data: Buffer to read from.
        offset: Position of the first byte.

    Returns:
        ``(value, next_offset)``.

    Raises:
        WasmDecodeError: If the buffer ends mid-integer.
    """
    result = 0
    shift = 0
    pos = offset
    while True:
        if pos >= len(data):
            raise WasmDecodeError("Unexpected end of data in LEB128 integer", offset=offset)
        byte = data[pos]
        pos += 1
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return result, pos
        shift += 7


def decode_signed(data: bytes, offset: int) -> tuple[int, int]:
    """Decode a signed LEB128 integer. Returns ``(value, next_offset)``."""
    result = 0
    shift = 0
    pos = offset
    while True:
        if pos >= len(data):
            raise WasmDecodeError("Unexpected end of data in LEB128 integer", offset=offset)
        byte = data[pos]
        pos += 1
        result |= (byte & 0x7F) << shift
        shift += 7
        if not byte & 0x80:
            if byte & 0x40:
                result -= 1 << shift
            return result, pos
