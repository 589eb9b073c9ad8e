#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import List

from .alphabet import ALPHABET, BITS_PER_SYMBOL, SYMBOL_INDEX
from .errors import InvalidSymbolError

_SYMBOL_MASK = (1 << BITS_PER_SYMBOL) - 1


class _SymbolWriter:
    def __init__(self) -> None:
        self._out: List[str] = []
        self._acc = 0
        self._bits = 0

    def write_byte(self, value: int) -> None:
        self._acc = (self._acc << 8) | (value & 0xFF)
        self._bits += 8
        while self._bits >= BITS_PER_SYMBOL:
            shift = self._bits - BITS_PER_SYMBOL
            self._out.append(ALPHABET[(self._acc >> shift) & _SYMBOL_MASK])
            self._acc &= (1 << shift) - 1
            self._bits = shift

    def to_text(self) -> str:
        out = list(self._out)
        if self._bits:
            # Zero-pad the tail on the right to a full symbol.
            out.append(ALPHABET[(self._acc << (BITS_PER_SYMBOL - self._bits)) & _SYMBOL_MASK])
        return "".join(out)


class _ByteReader:
    def __init__(self) -> None:
        self._buf = bytearray()
        self._acc = 0
        self._bits = 0

    def push(self, value: int) -> None:
        self._acc = (self._acc << BITS_PER_SYMBOL) | value
        self._bits += BITS_PER_SYMBOL
        if self._bits >= 8:
            shift = self._bits - 8
            self._buf.append((self._acc >> shift) & 0xFF)
            self._acc &= (1 << shift) - 1
            self._bits = shift

    def to_bytes(self) -> bytes:
        # Whatever is left (< 8 bits) is encoder padding.
        return bytes(self._buf)


def pack_to_symbols(data: bytes) -> str:
    """Re-encode `data` MSB-first, 7 bits per alphabet symbol."""
    writer = _SymbolWriter()
    for b in bytes(data):
        writer.write_byte(b)
    return writer.to_text()


def unpack_from_symbols(text: str) -> bytes:
    reader = _ByteReader()
    for pos, ch in enumerate(text):
        value = SYMBOL_INDEX.get(ch)
        if value is None:
            raise InvalidSymbolError(ch, pos)
        reader.push(value)
    return reader.to_bytes()


def packed_length(byte_count: int) -> int:
    """Number of symbols `pack_to_symbols` emits for `byte_count` bytes."""
    return -(-(int(byte_count) * 8) // BITS_PER_SYMBOL)
