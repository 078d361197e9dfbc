from __future__ import annotations

import pytest

from ledgerlock.core import is_open_word, normalize_address

ADDRESS = "0x5c0f1b8f6a1e2b3c4d5e6f708192a3b4c5d6e7f8"


@pytest.mark.parametrize(
    "value",
    [
        ADDRESS,
        ADDRESS.upper().replace("0X", "0x"),
        ADDRESS[2:],
        f"  {ADDRESS}\n",
        "0x" + ADDRESS[2:].rjust(64, "0"),
    ],
)
def test_equivalent_forms_normalize_equal(value):
    assert normalize_address(value) == ADDRESS


def test_short_hex_is_left_padded():
    assert normalize_address("0x1") == "0x" + "0" * 39 + "1"


@pytest.mark.parametrize("value", [None, "", "0x", "0x0"])
def test_empty_values_are_the_zero_address(value):
    assert normalize_address(value) == "0x" + "0" * 40


def test_malformed_input_never_matches_a_real_address():
    normalized = normalize_address("Not An Address")
    assert normalized == "0xnot an address"
    assert normalized != normalize_address(ADDRESS)
    assert normalize_address("Not An Address") == normalized


@pytest.mark.parametrize(
    ("word", "expected"),
    [
        (None, False),
        ("", False),
        ("0x", False),
        ("0x0", False),
        ("0x" + "0" * 64, False),
        ("0x1", True),
        ("0x" + "0" * 63 + "1", True),
        ("0x0100", True),
    ],
)
def test_is_open_word(word, expected):
    assert is_open_word(word) is expected
