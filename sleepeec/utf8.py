"""Conversion between UTF-8 byte sequences and UCS code points.

Both directions accept the historical 5- and 6-byte forms, covering code
points up to 0x7FFFFFFF.
"""

from __future__ import annotations

# (lead-byte shift, expected lead value after shift, payload mask, continuation count)
_LEAD_FORMS = (
    (7, 0x00, 0x7F, 0),
    (5, 0x06, 0x1F, 1),
    (4, 0x0E, 0x0F, 2),
    (3, 0x1E, 0x07, 3),
    (2, 0x3E, 0x03, 4),
    (1, 0x7E, 0x01, 5),
)

# (largest code point, lead-byte marker, byte count)
_ENCODE_FORMS = (
    (0x7F, 0x00, 1),
    (0x7FF, 0xC0, 2),
    (0xFFFF, 0xE0, 3),
    (0x1FFFFF, 0xF0, 4),
    (0x3FFFFFF, 0xF8, 5),
    (0x7FFFFFFF, 0xFC, 6),
)


def utf8_to_ucs(data: bytes) -> tuple[int, int]:
    """Decode the first character of ``data``.

    Returns ``(code_point, bytes_consumed)``. Raises ``ValueError`` when the
    bytes do not start with a well-formed UTF-8 sequence.
    """
    if not data:
        raise ValueError("no bytes to decode")
    lead = data[0]
    for shift, marker, mask, extra in _LEAD_FORMS:
        if lead >> shift != marker:
            continue
        size = extra + 1
        if len(data) < size:
            raise ValueError(f"truncated sequence: need {size} bytes")
        value = lead & mask
        for byte in data[1:size]:
            if byte >> 6 != 0x2:
                raise ValueError(f"invalid continuation byte 0x{byte:02x}")
            value = (value << 6) | (byte & 0x3F)
        return value, size
    raise ValueError(f"invalid lead byte 0x{lead:02x}")


def ucs_to_utf8(code: int) -> bytes:
    """Encode a code point as UTF-8.

    Surrogates (U+D800..U+DFFF), the noncharacters U+FFFE and U+FFFF,
    negative values and values above 0x7FFFFFFF raise ``ValueError``.
    """
    if 0xD800 <= code <= 0xDFFF:
        raise ValueError(f"surrogate code point U+{code:04X}")
    if 0xFFFE <= code <= 0xFFFF:
        raise ValueError(f"noncharacter U+{code:04X}")
    if code < 0:
        raise ValueError("negative code point")
    for limit, marker, size in _ENCODE_FORMS:
        if code <= limit:
            if size == 1:
                return bytes([code])
            tail = [0x80 | ((code >> (6 * i)) & 0x3F) for i in reversed(range(size - 1))]
            return bytes([marker | (code >> (6 * (size - 1)))] + tail)
    raise ValueError(f"code point 0x{code:X} out of range")