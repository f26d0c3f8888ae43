import pytest

from sleepeec.utf8 import ucs_to_utf8, utf8_to_ucs


@pytest.mark.parametrize("char", ["A", "\x00", "\x7f", "é", "\u07ff", "€", "\uffd0", "\U0001f600", "\U0010ffff"])
def test_encode_matches_standard_utf8(char):
    assert ucs_to_utf8(ord(char)) == char.encode("utf-8")


@pytest.mark.parametrize("char", ["A", "é", "€", "\U0001f600"])
def test_decode_matches_standard_utf8(char):
    encoded = char.encode("utf-8")
    assert utf8_to_ucs(encoded) == (ord(char), len(encoded))


def test_decode_only_consumes_first_character():
    data = "€abc".encode("utf-8")
    code, used = utf8_to_ucs(data)
    assert code == ord("€")
    assert data[used:] == b"abc"


@pytest.mark.parametrize("code", [0x200000, 0x3FFFFFF, 0x4000000, 0x7FFFFFFF, 0x1FFFFF])
def test_extended_forms_round_trip(code):
    encoded = ucs_to_utf8(code)
    assert utf8_to_ucs(encoded) == (code, len(encoded))


def test_extended_form_lengths():
    assert len(ucs_to_utf8(0x3FFFFFF)) == 5
    assert len(ucs_to_utf8(0x7FFFFFFF)) == 6


@pytest.mark.parametrize("code", [0xD800, 0xDFFF, 0xFFFE, 0xFFFF, -1, 0x80000000])
def test_encode_rejects_invalid_code_points(code):
    with pytest.raises(ValueError):
        ucs_to_utf8(code)


def test_decode_rejects_empty_input():
    with pytest.raises(ValueError):
        utf8_to_ucs(b"")


def test_decode_rejects_truncated_sequence():
    encoded = "€".encode("utf-8")
    with pytest.raises(ValueError, match="truncated"):
        utf8_to_ucs(encoded[:2])


def test_decode_rejects_bad_continuation():
    encoded = bytearray("é".encode("utf-8"))
    encoded[1] = ord("A")
    with pytest.raises(ValueError, match="continuation"):
        utf8_to_ucs(bytes(encoded))


@pytest.mark.parametrize("lead", [0x80, 0xBF, 0xFE, 0xFF])
def test_decode_rejects_invalid_lead_byte(lead):
    with pytest.raises(ValueError, match="lead byte"):
        utf8_to_ucs(bytes([lead, 0x80, 0x80, 0x80, 0x80, 0x80, 0x80]))