#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""128-symbol output alphabet for share codes.

Confusable glyphs are left out (I/O, l, 0/1). The four base ranges give 87
symbols; the rest is taken, in order, from EXTENDED_CHARS.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Mapping, Tuple

from .errors import ConfigurationError

ALPHABET_SIZE = 128
BITS_PER_SYMBOL = 7

UPPERCASE = "ABCDEFGHJKLMNPQRSTUVWXYZ"
LOWERCASE = "abcdefghijkmnopqrstuvwxyz"
DIGITS = "23456789"
PUNCTUATION = "-_!@#$%^&*()=+[]{}|;:,.<>?~`\"'"
EXTENDED_CHARS = (
    "\\/§©®°±²³´µ¶·¸¹º»¼½¾¿ÀÁÂÃÄÅÆÇÈÉÊËÌÍÎÏÐÑÒÓÔÕÖ×ØÙÚÛÜÝÞß"
    "àáâãäåæçèéêëìíîïðñòóôõö÷øùúûüýþÿ"
)


def build_alphabet(
    upper: str = UPPERCASE,
    lower: str = LOWERCASE,
    digits: str = DIGITS,
    punctuation: str = PUNCTUATION,
    extended: str = EXTENDED_CHARS,
) -> Tuple[str, ...]:
    base = upper + lower + digits + punctuation
    needed = ALPHABET_SIZE - len(base)
    if needed < 0:
        raise ConfigurationError(f"base ranges hold {len(base)} symbols, more than {ALPHABET_SIZE}")
    symbols = tuple(base + extended[:needed])
    unique = len(set(symbols))
    if len(symbols) != ALPHABET_SIZE or unique != ALPHABET_SIZE:
        raise ConfigurationError(
            f"alphabet must have exactly {ALPHABET_SIZE} unique symbols, "
            f"got {len(symbols)} symbols ({unique} unique)"
        )
    return symbols


def alphabet_report(symbols: Tuple[str, ...]) -> Dict[str, int]:
    """Composition counts, as printed by `saveCode.py alphabet`."""
    base = len(UPPERCASE) + len(LOWERCASE) + len(DIGITS) + len(PUNCTUATION)
    return {
        "uppercase": len(UPPERCASE),
        "lowercase": len(LOWERCASE),
        "digits": len(DIGITS),
        "punctuation": len(PUNCTUATION),
        "extended_available": len(EXTENDED_CHARS),
        "extended_used": len(symbols) - base,
        "total": len(symbols),
        "unique": len(set(symbols)),
    }


ALPHABET: Tuple[str, ...] = build_alphabet()
SYMBOL_INDEX: Mapping[str, int] = MappingProxyType({s: i for i, s in enumerate(ALPHABET)})
