#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""Per-payload substring dictionary.

Compressed layout::

    \\x02 entry0 \\x00 entry1 ... \\x03 body

where every dictionary hit in `body` is ``\\x01 chr(32 + index) \\x01``.
Text without the leading \\x02 is stored as-is.
"""

from __future__ import annotations

from typing import Dict, List, Tuple

from .errors import MalformedDictionaryError

DICT_SEP = "\x00"
TOKEN_ESC = "\x01"
DICT_START = "\x02"
DICT_END = "\x03"
RESERVED = frozenset((DICT_SEP, TOKEN_ESC, DICT_START, DICT_END))

MIN_PATTERN_LEN = 4
MAX_PATTERN_LEN = 15
MIN_OCCURRENCES = 3
MAX_DICT_ENTRIES = 30
TOKEN_OVERHEAD = 3
TOKEN_INDEX_BASE = 32


def dict_token(index: int) -> str:
    return TOKEN_ESC + chr(TOKEN_INDEX_BASE + index) + TOKEN_ESC


def pattern_benefit(length: int, count: int) -> int:
    return length * count - (length + TOKEN_OVERHEAD)


def _count_patterns(text: str) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    max_len = min(MAX_PATTERN_LEN, len(text) // 3)
    for length in range(MIN_PATTERN_LEN, max_len + 1):
        for i in range(len(text) - length + 1):
            pattern = text[i : i + length]
            if RESERVED.intersection(pattern):
                continue
            counts[pattern] = counts.get(pattern, 0) + 1
    return counts


def find_candidates(text: str) -> List[Tuple[str, int]]:
    """Patterns worth a dictionary slot, best first: (pattern, benefit)."""
    useful = []
    for pattern, count in _count_patterns(text).items():
        if count < MIN_OCCURRENCES:
            continue
        benefit = pattern_benefit(len(pattern), count)
        if benefit > 0:
            useful.append((pattern, benefit))
    # sorted() is stable: ties keep first-seen order (shorter, then leftmost).
    useful = sorted(useful, key=lambda pb: -pb[1])
    return useful[:MAX_DICT_ENTRIES]


def build_dictionary(text: str) -> Tuple[List[str], str]:
    """Greedy substitution. Returns (dictionary, substituted body)."""
    dictionary: List[str] = []
    body = text
    for pattern, _benefit in find_candidates(text):
        # Earlier substitutions may have eaten into this pattern.
        count = body.count(pattern)
        if count < MIN_OCCURRENCES or pattern_benefit(len(pattern), count) <= 0:
            continue
        body = body.replace(pattern, dict_token(len(dictionary)))
        dictionary.append(pattern)
        if len(dictionary) >= MAX_DICT_ENTRIES:
            break
    return dictionary, body


def dict_compress(text: str) -> str:
    dictionary, body = build_dictionary(text)
    if not dictionary:
        return text
    out = DICT_START + DICT_SEP.join(dictionary) + DICT_END + body
    if len(out) >= len(text):
        return text
    return out


def parse_header(text: str) -> Tuple[List[str], str]:
    """Split a compressed text into (dictionary, body)."""
    if not text.startswith(DICT_START):
        raise MalformedDictionaryError("missing dictionary start marker")
    end = text.find(DICT_END, 1)
    if end == -1:
        raise MalformedDictionaryError("dictionary header is not terminated")
    header = text[1:end]
    dictionary = header.split(DICT_SEP) if header else []
    return dictionary, text[end + 1 :]


def dict_decompress(text: str, strict: bool = False) -> str:
    if not text.startswith(DICT_START):
        return text
    try:
        dictionary, body = parse_header(text)
    except MalformedDictionaryError:
        if strict:
            raise
        return text
    if strict and not 0 < len(dictionary) <= MAX_DICT_ENTRIES:
        raise MalformedDictionaryError(f"bad dictionary size: {len(dictionary)}")
    # Highest index first.
    for index in range(len(dictionary) - 1, -1, -1):
        body = body.replace(dict_token(index), dictionary[index])
    if strict and TOKEN_ESC in body:
        raise MalformedDictionaryError("dictionary reference out of range")
    return body
