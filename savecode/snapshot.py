#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""Game-state records exchanged with the simulation and UI.

`to_dict`/`from_dict` use the camelCase field names of the game client.
The *_to_wire / *_from_wire helpers map each record shape to the short keys
stored inside a code.
"""

from __future__ import annotations

import copy
import logging
import math
import warnings
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .errors import ItemValidationWarning, SnapshotEncodeError, SnapshotValidationError

log = logging.getLogger(__name__)

LOADOUT_SLOTS = ("weapon", "armor", "utility")


@dataclass
class ItemStats:
    damage: Optional[float] = None
    defense: Optional[float] = None
    speed: Optional[float] = None
    vision: Optional[float] = None
    heal: Optional[float] = None

    def present(self) -> Dict[str, float]:
        """Stats that are set, by name."""
        return {k: v for k, v in self.to_dict().items() if v is not None}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "damage": self.damage,
            "defense": self.defense,
            "speed": self.speed,
            "vision": self.vision,
            "heal": self.heal,
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "ItemStats":
        return ItemStats(
            damage=data.get("damage"),
            defense=data.get("defense"),
            speed=data.get("speed"),
            vision=data.get("vision"),
            heal=data.get("heal"),
        )


@dataclass
class Item:
    id: str = ""
    name: str = ""
    type: str = ""
    rarity: str = ""
    stats: Optional[ItemStats] = None
    price: int = 0
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "rarity": self.rarity,
        }
        if self.stats is not None:
            data["stats"] = self.stats.present()
        data["price"] = self.price
        data["description"] = self.description
        return data

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "Item":
        stats = data.get("stats")
        return Item(
            id=data.get("id") or "",
            name=data.get("name") or "",
            type=data.get("type") or "",
            rarity=data.get("rarity") or "",
            stats=ItemStats.from_dict(stats) if isinstance(stats, Mapping) else None,
            price=data.get("price") or 0,
            description=data.get("description") or "",
        )


def _item_from_raw(raw: Any, where: str) -> Optional[Item]:
    if isinstance(raw, Mapping):
        return Item.from_dict(raw)
    msg = f"{where}: {type(raw).__name__} entry is not an item, dropped"
    log.warning(msg)
    warnings.warn(msg, ItemValidationWarning, stacklevel=3)
    return None


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise SnapshotEncodeError(f"{key} must be an object, got {type(value).__name__}")
    return value


def _items_from_raw(raw: Any, where: str) -> List[Item]:
    if raw is None:
        return []
    if not isinstance(raw, (list, tuple)):
        raise SnapshotEncodeError(f"{where} must be a list, got {type(raw).__name__}")
    items = (_item_from_raw(i, where) for i in raw)
    return [i for i in items if i is not None]


@dataclass
class StatBlock:
    hp: float = 100
    max_hp: float = 100
    coins: float = 0
    damage: float = 10
    speed: float = 1
    vision_radius: float = 3.5

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hp": self.hp,
            "maxHp": self.max_hp,
            "coins": self.coins,
            "damage": self.damage,
            "speed": self.speed,
            "visionRadius": self.vision_radius,
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "StatBlock":
        d = StatBlock()
        return StatBlock(
            hp=data.get("hp", d.hp),
            max_hp=data.get("maxHp", d.max_hp),
            coins=data.get("coins", d.coins),
            damage=data.get("damage", d.damage),
            speed=data.get("speed", d.speed),
            vision_radius=data.get("visionRadius", d.vision_radius),
        )


@dataclass
class SettingsBlock:
    music_volume: float = 0.5
    sfx_volume: float = 0.5
    joystick_position: str = "left"
    mobile_control_type: str = "dpad"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "musicVolume": self.music_volume,
            "sfxVolume": self.sfx_volume,
            "joystickPosition": self.joystick_position,
            "mobileControlType": self.mobile_control_type,
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "SettingsBlock":
        d = SettingsBlock()
        return SettingsBlock(
            music_volume=data.get("musicVolume", d.music_volume),
            sfx_volume=data.get("sfxVolume", d.sfx_volume),
            joystick_position=data.get("joystickPosition", d.joystick_position),
            mobile_control_type=data.get("mobileControlType") or d.mobile_control_type,
        )


@dataclass
class Loadout:
    weapon: Optional[Item] = None
    armor: Optional[Item] = None
    utility: Optional[Item] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            slot: (getattr(self, slot).to_dict() if getattr(self, slot) is not None else None)
            for slot in LOADOUT_SLOTS
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "Loadout":
        slots = {}
        for slot in LOADOUT_SLOTS:
            raw = data.get(slot)
            slots[slot] = _item_from_raw(raw, slot) if raw is not None else None
        return Loadout(**slots)


@dataclass
class GameStateSnapshot:
    level: int = 1
    stats: StatBlock = field(default_factory=StatBlock)
    inventory: List[Item] = field(default_factory=list)
    loadout: Loadout = field(default_factory=Loadout)
    active_mods: List[str] = field(default_factory=list)
    boss_drops: List[Item] = field(default_factory=list)
    settings: SettingsBlock = field(default_factory=SettingsBlock)
    # Presentation only, never encoded.
    screen: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "level": self.level,
            "stats": self.stats.to_dict(),
            "inventory": [i.to_dict() for i in self.inventory],
            "loadout": self.loadout.to_dict(),
            "activeMods": list(self.active_mods),
            "bossDrops": [i.to_dict() for i in self.boss_drops],
            "settings": self.settings.to_dict(),
        }
        if self.screen is not None:
            data["screen"] = self.screen
        return data

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "GameStateSnapshot":
        # The game client calls the level "currentLevel".
        level = data.get("level", data.get("currentLevel", 1))
        mods = data.get("activeMods") or []
        return GameStateSnapshot(
            level=level,
            stats=StatBlock.from_dict(_section(data, "stats")),
            inventory=_items_from_raw(data.get("inventory"), "inventory"),
            loadout=Loadout.from_dict(_section(data, "loadout")),
            active_mods=list(mods) if isinstance(mods, (list, tuple)) else mods,
            boss_drops=_items_from_raw(data.get("bossDrops"), "bossDrops"),
            settings=SettingsBlock.from_dict(_section(data, "settings")),
            screen=data.get("screen"),
        )


# Canonical defaults in wire form. Private: hand out copies only.
_WIRE_DEFAULTS: Dict[str, Any] = {
    "l": 1,
    "s": {"hp": 100, "maxHp": 100, "coins": 0, "damage": 10, "speed": 1, "visionRadius": 3.5},
    "I": [],
    "Lo": {"w": None, "a": None, "u": None},
    "m": [],
    "b": [],
    "S": {"1": 0.5, "2": 0.5, "3": "left", "4": "dpad"},
}

_SETTING_KEYS = (
    ("music_volume", "1"),
    ("sfx_volume", "2"),
    ("joystick_position", "3"),
    ("mobile_control_type", "4"),
)


def canonical_defaults() -> Dict[str, Any]:
    return copy.deepcopy(_WIRE_DEFAULTS)


def is_finite_number(value: Any) -> bool:
    """Real number that survives float conversion (no bool, NaN, inf or huge int)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(float(value))
    except OverflowError:
        return False


def _stats_problem(stats: StatBlock) -> Optional[str]:
    for name, value in stats.to_dict().items():
        if not is_finite_number(value):
            return f"stat {name} must be a finite number, got {value!r}"
    return None


def _settings_problem(settings: SettingsBlock) -> Optional[str]:
    if not is_finite_number(settings.music_volume) or not is_finite_number(settings.sfx_volume):
        return "volume settings must be finite numbers"
    if not isinstance(settings.joystick_position, str) or not isinstance(settings.mobile_control_type, str):
        return "control settings must be strings"
    return None


def stats_to_wire(stats: StatBlock) -> Dict[str, Any]:
    problem = _stats_problem(stats)
    if problem:
        raise SnapshotEncodeError(problem)
    return stats.to_dict()


def stats_from_wire(data: Any) -> StatBlock:
    if not isinstance(data, Mapping):
        raise SnapshotValidationError("stats must be an object")
    stats = StatBlock.from_dict(data)
    problem = _stats_problem(stats)
    if problem:
        raise SnapshotValidationError(problem)
    return stats


def settings_to_wire(settings: SettingsBlock) -> Dict[str, Any]:
    problem = _settings_problem(settings)
    if problem:
        raise SnapshotEncodeError(problem)
    return {key: getattr(settings, name) for name, key in _SETTING_KEYS}


def settings_from_wire(data: Any) -> SettingsBlock:
    if not isinstance(data, Mapping):
        raise SnapshotValidationError("settings must be an object")
    settings = SettingsBlock(**{name: data.get(key) for name, key in _SETTING_KEYS})
    problem = _settings_problem(settings)
    if problem:
        raise SnapshotValidationError(problem)
    return settings
