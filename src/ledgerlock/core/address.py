from __future__ import annotations

import string

ADDRESS_HEX_DIGITS = 40


def _is_hex(value: str) -> bool:
    return all(ch in string.hexdigits for ch in value)


def normalize_address(address: str | None) -> str:
    """Return the canonical ``0x``-prefixed form of an address.

    Storage words are 32 bytes wide with the address in the low 20 bytes, so
    hex input keeps only its last 40 digits and is left-padded with zeros.
    Anything that is not hex is lowered and prefixed, which never equals a
    real address.
    """
    cleaned = (address or "").strip().lower()
    if cleaned.startswith("0x"):
        cleaned = cleaned[2:]

    if not _is_hex(cleaned):
        return f"0x{cleaned}"

    return "0x" + cleaned[-ADDRESS_HEX_DIGITS:].rjust(ADDRESS_HEX_DIGITS, "0")
