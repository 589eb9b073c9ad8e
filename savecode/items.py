#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""Compact item records.

Only identity, type, rarity and non-zero stats are kept in a code. Price is
recomputed from stats and rarity; the description is left empty for the
presentation layer to fill from its templates.
"""

from __future__ import annotations

import logging
import math
import warnings
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .errors import ItemValidationWarning, SnapshotEncodeError, SnapshotValidationError
from .snapshot import LOADOUT_SLOTS, Item, ItemStats, Loadout, is_finite_number

log = logging.getLogger(__name__)

RARITY_MULTIPLIERS: Dict[str, float] = {
    "common": 1.0,
    "rare": 1.5,
    "epic": 2.0,
    "legendary": 3.0,
}
DEFAULT_RARITY_MULTIPLIER = 1.0

# (Item field, compact key)
IDENTITY_KEYS: Tuple[Tuple[str, str], ...] = (
    ("id", "i"),
    ("name", "n"),
    ("type", "t"),
    ("rarity", "r"),
)
STAT_KEYS: Tuple[Tuple[str, str], ...] = (
    ("damage", "d"),
    ("defense", "f"),
    ("speed", "p"),
    ("vision", "v"),
    ("heal", "h"),
)


def rarity_multiplier(rarity: str) -> float:
    return RARITY_MULTIPLIERS.get(rarity, DEFAULT_RARITY_MULTIPLIER)


def item_price(stats: Optional[ItemStats], rarity: str) -> int:
    if stats is None:
        return 0
    total = sum(stats.present().values())
    return int(math.floor(total * 2 * rarity_multiplier(rarity)))


def minimize_item(item: Union[Item, Mapping[str, Any], None]) -> Optional[Dict[str, Any]]:
    if item is None:
        return None
    if isinstance(item, Mapping):
        item = Item.from_dict(item)
    missing = [name for name, _key in IDENTITY_KEYS if not getattr(item, name)]
    if missing:
        msg = f"item {item.id or '?'} dropped from code, missing {', '.join(missing)}"
        log.warning(msg)
        warnings.warn(msg, ItemValidationWarning, stacklevel=2)
        return None

    bad = [name for name, _key in IDENTITY_KEYS if not isinstance(getattr(item, name), str)]
    if bad:
        raise SnapshotEncodeError(f"item {item.id!r} fields must be strings: {', '.join(bad)}")
    compact: Dict[str, Any] = {key: getattr(item, name) for name, key in IDENTITY_KEYS}
    if item.stats is not None:
        stats: Dict[str, Any] = {}
        for name, key in STAT_KEYS:
            value = getattr(item.stats, name)
            if value is None or value == 0:
                continue
            if not is_finite_number(value):
                raise SnapshotEncodeError(f"item {item.id} stat {name} must be a finite number, got {value!r}")
            stats[key] = value
        if stats:
            compact["s"] = stats
    return compact


def restore_item(compact: Mapping[str, Any]) -> Item:
    if not isinstance(compact, Mapping):
        raise SnapshotValidationError(f"item must be an object, got {type(compact).__name__}")
    fields: Dict[str, str] = {}
    for name, key in IDENTITY_KEYS:
        value = compact.get(key)
        if not isinstance(value, str) or not value:
            raise SnapshotValidationError(f"item is missing {name}")
        fields[name] = value

    stats: Optional[ItemStats] = None
    raw_stats = compact.get("s")
    if raw_stats is not None:
        if not isinstance(raw_stats, Mapping):
            raise SnapshotValidationError("item stats must be an object")
        values: Dict[str, Any] = {}
        for name, key in STAT_KEYS:
            value = raw_stats.get(key)
            if value is None:
                continue
            if not is_finite_number(value):
                raise SnapshotValidationError(f"item stat {name} must be a finite number")
            values[name] = value
        stats = ItemStats(**values)

    try:
        price = item_price(stats, fields["rarity"])
    except (OverflowError, ValueError) as e:
        raise SnapshotValidationError(f"item {fields['id']} price out of range: {e}") from e

    return Item(
        id=fields["id"],
        name=fields["name"],
        type=fields["type"],
        rarity=fields["rarity"],
        stats=stats,
        price=price,
        description="",
    )


def items_to_wire(items: Sequence[Item]) -> List[Dict[str, Any]]:
    """Compact list; invalid items are left out."""
    return [c for c in (minimize_item(i) for i in items) if c is not None]


def items_from_wire(data: Any) -> List[Item]:
    if not isinstance(data, list):
        raise SnapshotValidationError("item list must be an array")
    return [restore_item(c) for c in data]


def loadout_to_wire(loadout: Loadout) -> Dict[str, Any]:
    return {slot[0]: minimize_item(getattr(loadout, slot)) for slot in LOADOUT_SLOTS}


def loadout_from_wire(data: Any) -> Loadout:
    if not isinstance(data, Mapping):
        raise SnapshotValidationError("loadout must be an object")
    slots: Dict[str, Optional[Item]] = {}
    for slot in LOADOUT_SLOTS:
        raw = data.get(slot[0])
        slots[slot] = restore_item(raw) if raw is not None else None
    return Loadout(**slots)
