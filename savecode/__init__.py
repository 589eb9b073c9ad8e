#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
savecode package

Share codes for game-state snapshots: a short string over a fixed 128-symbol
alphabet that restores level, stats, items, mods and settings. saveCode.py is
the command-line entrypoint; everything else lives here as testable units.
"""

from __future__ import annotations

from .codec import DecodeResult, code_stats, decode, encode, try_decode
from .errors import (
    ConfigurationError,
    InvalidSymbolError,
    ItemValidationWarning,
    MalformedDictionaryError,
    SaveCodeError,
    SnapshotEncodeError,
    SnapshotValidationError,
    StructuralParseError,
)
from .snapshot import GameStateSnapshot, Item, ItemStats, Loadout, SettingsBlock, StatBlock

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "DecodeResult",
    "GameStateSnapshot",
    "InvalidSymbolError",
    "Item",
    "ItemStats",
    "ItemValidationWarning",
    "Loadout",
    "MalformedDictionaryError",
    "SaveCodeError",
    "SettingsBlock",
    "SnapshotEncodeError",
    "SnapshotValidationError",
    "StatBlock",
    "StructuralParseError",
    "code_stats",
    "decode",
    "encode",
    "try_decode",
]
