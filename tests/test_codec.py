import string

import pytest

from passwatch.app.security import codec


def test_derive_key_is_character_sum_mod_255():
    assert codec.derive_key("abc") == (97 + 98 + 99) % 255


def test_encrypt_known_value():
    # key byte for "abc" is 0x27
    assert codec.encrypt("A", "abc") == "66"
    assert codec.encrypt("hi", "abc") == "4f4e"


def test_encrypt_output_is_lowercase_hex_pair_per_ascii_char():
    encoded = codec.encrypt("Secret!", "3f1c6a0e-user")
    assert len(encoded) == 2 * len("Secret!")
    assert all(c in "0123456789abcdef" for c in encoded)


@pytest.mark.parametrize("key", ["k", "abc", "3f1c6a0e-9b7d-4c1e-a2f5-0d1e2f3a4b5c", "ÿ"])
def test_round_trip_printable_ascii(key):
    text = string.printable.strip()
    assert codec.decrypt(codec.encrypt(text, key), key) == text


def test_zero_key_byte_is_identity_hex():
    # chr(255) sums to 255, which reduces to 0
    assert codec.encrypt("A", "ÿ") == "41"


def test_round_trip_non_ascii():
    key = "user-1"
    assert codec.decrypt(codec.encrypt("senha çã €", key), key) == "senha çã €"


@pytest.mark.parametrize("empty", [None, ""])
def test_empty_values_map_to_none(empty):
    assert codec.encrypt(empty, "abc") is None
    assert codec.decrypt(empty, "abc") is None


def test_empty_key_raises():
    with pytest.raises(ValueError):
        codec.encrypt("secret", "")
    with pytest.raises(ValueError):
        codec.decrypt("66", "")


def test_dangling_hex_digit_is_ignored():
    assert codec.decrypt("666", "abc") == "A"


def test_garbage_input_raises_value_error():
    with pytest.raises(ValueError):
        codec.decrypt("zz", "abc")


def test_per_character_legacy_value_with_accent_does_not_decode():
    # "ç" (U+00E7) XORed as a single code point with key byte 0x27
    legacy = format(0xE7 ^ 0x27, "02x")
    with pytest.raises(ValueError):
        codec.decrypt(legacy, "abc")
