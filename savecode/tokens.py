#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""Static substitution of schema literals (field names, enum values).

Both directions are a single greedy longest-match scan over a trie, so a
literal that is a prefix of another (``"i":`` / ``"id":"``, ``~I`` / ``~I2``)
can never shadow the longer one, whatever the table order.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

TOKEN_ESCAPE = "~"

TOKEN_TABLE: Tuple[Tuple[str, str], ...] = (
    # raw escape glyph in content
    (TOKEN_ESCAPE, TOKEN_ESCAPE + TOKEN_ESCAPE),
    # field names
    ('"description":"', "~d"),
    ('"joystickPosition":', "~j"),
    ('"visionRadius":', "~V"),
    ('"musicVolume":', "~Mu"),
    ('"level":', "~l"),
    ('"activeMods":', "~m"),
    ('"bossDrops":', "~b"),
    ('"inventory":', "~I"),
    ('"rarity":"', "~r"),
    ('"stats":', "~s"),
    ('"damage":', "~D"),
    ('"defense":', "~f"),
    ('"speed":', "~p"),
    ('"vision":', "~v"),
    ('"loadout":', "~Lo"),
    ('"settings":', "~S"),
    ('"id":"', "~i"),
    ('"i":', "~I2"),
    ('"name":"', "~n"),
    ('"n":', "~N2"),
    ('"type":"', "~t"),
    ('"t":', "~T2"),
    ('"r":', "~R2"),
    ('"heal":', "~h"),
    ('"price":', "~c"),
    ('"weapon":', "~w"),
    ('"armor":', "~a"),
    ('"utility":', "~u"),
    ('"hp":', "~H"),
    ('"maxHp":', "~M"),
    ('"coins":', "~C"),
    # enum values
    ('"common"', "~0"),
    ('"rare"', "~1"),
    ('"epic"', "~2"),
    ('"legendary"', "~3"),
    ('"weapon"', "~W"),
    ('"armor"', "~A"),
    ('"utility"', "~U"),
    ('"consumable"', "~X"),
    ('"left"', "~L"),
    ('"right"', "~R"),
)

_TERMINAL = ""


def _build_trie(pairs: Sequence[Tuple[str, str]]) -> dict:
    root: dict = {}
    for pattern, replacement in pairs:
        if not pattern:
            continue
        node = root
        for ch in pattern:
            node = node.setdefault(ch, {})
        if _TERMINAL in node:
            raise ValueError(f"duplicate token table entry: {pattern!r}")
        node[_TERMINAL] = replacement
    return root


def _scan(text: str, trie: dict) -> str:
    out: List[str] = []
    i = 0
    n = len(text)
    while i < n:
        node = trie
        j = i
        best: Optional[str] = None
        best_end = i
        while j < n:
            nxt = node.get(text[j])
            if nxt is None:
                break
            node = nxt
            j += 1
            if _TERMINAL in node:
                best = node[_TERMINAL]
                best_end = j
        if best is not None:
            out.append(best)
            i = best_end
        else:
            out.append(text[i])
            i += 1
    return "".join(out)


@dataclass(frozen=True)
class _TokenTries:
    compress: dict
    decompress: dict


_TRIES: Optional[_TokenTries] = None
_TRIES_LOCK = threading.Lock()


def _tries() -> _TokenTries:
    global _TRIES
    tries = _TRIES
    if tries is not None:
        return tries
    with _TRIES_LOCK:
        if _TRIES is None:
            _TRIES = _TokenTries(
                compress=_build_trie(TOKEN_TABLE),
                decompress=_build_trie([(tok, lit) for lit, tok in TOKEN_TABLE]),
            )
        return _TRIES


def compress_tokens(text: str) -> str:
    return _scan(text, _tries().compress)


def decompress_tokens(text: str) -> str:
    return _scan(text, _tries().decompress)

