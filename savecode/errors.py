#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations


class SaveCodeError(ValueError):
    pass


class ConfigurationError(SaveCodeError):
    """Static codec tables are inconsistent (raised at import time)."""


class InvalidSymbolError(SaveCodeError):
    def __init__(self, symbol: str, position: int) -> None:
        super().__init__(f"invalid code symbol {symbol!r} at position {position}")
        self.symbol = symbol
        self.position = position


class MalformedDictionaryError(SaveCodeError):
    pass


class StructuralParseError(SaveCodeError):
    pass


class SnapshotValidationError(StructuralParseError):
    """Decoded data parsed fine but does not describe a usable snapshot."""


class SnapshotEncodeError(SaveCodeError):
    pass


class ItemValidationWarning(UserWarning):
    """An item without id/name/type/rarity was left out of the code."""
