# passwatch/app/security/codec.py
"""
Reversible obfuscation for historical credential values.

The audit history keeps the real before/after value of sensitive fields so
the owner can review them after re-entering their password. Those values are
stored through this codec so they are not sitting in plain text in an easily
grepped column.

This is NOT encryption:
- the key is derived from the public user id (sum of character codes mod 255)
- every byte is XORed with that same single byte

Anyone with database access can recover the values with a frequency
analysis in seconds. It only exists for behavioural parity with the stored
history format. Replacing it with an authenticated cipher (and a per-user
random key stored apart from the user id) means migrating the existing
`encrypted_*` columns.

Format: the UTF-8 bytes of the text, each XORed with the key byte and written
as two lowercase hex digits. For ASCII input this is one hex pair per
character.

History written by the earlier per-character scheme (one XORed code point
per hex pair) only matches this format for ASCII text. Stored values that
contain characters from U+0080 onwards, such as "ç" or "ã", do not decode
through this module; they usually fail as invalid UTF-8 and the reader keeps the
redaction placeholder for that entry.
"""
from typing import Optional


def derive_key(key: str) -> int:
    """
    Reduce a key string to the single XOR byte.

    Raises:
        ValueError: if the key is empty
    """
    if not key:
        raise ValueError("Codec key must not be empty")
    return sum(ord(char) for char in key) % 255


def encrypt(text: Optional[str], key: str) -> Optional[str]:
    """
    Obfuscate `text` with `key`.

    None and "" both mean "no value" and return None.
    """
    if not text:
        return None

    key_byte = derive_key(key)
    return "".join(
        format(byte ^ key_byte, "02x")
        for byte in text.encode("utf-8")
    )


def decrypt(encoded: Optional[str], key: str) -> Optional[str]:
    """
    Reverse `encrypt`.

    A dangling final hex digit is ignored.

    Raises:
        ValueError: if `encoded` is not hex or does not decode to UTF-8
    """
    if not encoded:
        return None

    key_byte = derive_key(key)
    usable = len(encoded) - (len(encoded) % 2)
    raw = bytes(
        int(encoded[i:i + 2], 16) ^ key_byte
        for i in range(0, usable, 2)
    )
    return raw.decode("utf-8")
