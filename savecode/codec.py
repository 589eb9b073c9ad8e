#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""Snapshot <-> share code.

Encode: wire form -> minimize -> JSON -> token substitution -> dictionary
compression -> UTF-8 -> 7-bit symbols. Decode runs the same stages backwards
and reports any failure through DecodeResult instead of raising.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

from .bitpack import pack_to_symbols, unpack_from_symbols
from .dictionary import DICT_START, dict_compress, dict_decompress, parse_header
from .errors import SaveCodeError, SnapshotEncodeError, SnapshotValidationError, StructuralParseError
from .items import items_from_wire, items_to_wire, loadout_from_wire, loadout_to_wire
from .minimize import minimize, restore
from .snapshot import (
    GameStateSnapshot,
    canonical_defaults,
    settings_from_wire,
    settings_to_wire,
    stats_from_wire,
    stats_to_wire,
)
from .tokens import compress_tokens, decompress_tokens

log = logging.getLogger(__name__)

TEXT_ENCODING = "utf-8"
RESUME_SCREEN = "lobby"


@dataclass(frozen=True)
class DecodeResult:
    snapshot: Optional[GameStateSnapshot] = None
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.snapshot is not None

    @staticmethod
    def success(snapshot: GameStateSnapshot) -> "DecodeResult":
        return DecodeResult(snapshot=snapshot)

    @staticmethod
    def failure(reason: str) -> "DecodeResult":
        return DecodeResult(reason=reason or "invalid code")


def snapshot_to_wire(snapshot: GameStateSnapshot) -> Dict[str, Any]:
    level = snapshot.level
    if isinstance(level, bool) or not isinstance(level, int) or level < 0:
        raise SnapshotEncodeError(f"level must be a non-negative integer, got {level!r}")
    mods = snapshot.active_mods
    if not isinstance(mods, (list, tuple)) or not all(isinstance(m, str) for m in mods):
        raise SnapshotEncodeError("active mods must be strings")
    return {
        "l": level,
        "s": stats_to_wire(snapshot.stats),
        "I": items_to_wire(snapshot.inventory),
        "Lo": loadout_to_wire(snapshot.loadout),
        "m": list(mods),
        "b": items_to_wire(snapshot.boss_drops),
        "S": settings_to_wire(snapshot.settings),
    }


def snapshot_from_wire(data: Mapping[str, Any]) -> GameStateSnapshot:
    level = data.get("l")
    if isinstance(level, bool) or not isinstance(level, int) or level < 0:
        raise SnapshotValidationError(f"bad level: {level!r}")
    mods = data.get("m")
    if not isinstance(mods, list) or not all(isinstance(m, str) for m in mods):
        raise SnapshotValidationError("active mods must be a list of strings")
    return GameStateSnapshot(
        level=level,
        stats=stats_from_wire(data.get("s")),
        inventory=items_from_wire(data.get("I")),
        loadout=loadout_from_wire(data.get("Lo")),
        active_mods=list(mods),
        boss_drops=items_from_wire(data.get("b")),
        settings=settings_from_wire(data.get("S")),
    )


def _as_snapshot(snapshot: Union[GameStateSnapshot, Mapping[str, Any]]) -> GameStateSnapshot:
    if isinstance(snapshot, GameStateSnapshot):
        return snapshot
    if isinstance(snapshot, Mapping):
        return GameStateSnapshot.from_dict(snapshot)
    raise SnapshotEncodeError(f"cannot encode {type(snapshot).__name__}")


def serialize_snapshot(snapshot: Union[GameStateSnapshot, Mapping[str, Any]]) -> str:
    """Minimized JSON text, before any compression."""
    wire = snapshot_to_wire(_as_snapshot(snapshot))
    try:
        minimized = minimize(wire, canonical_defaults())
        return json.dumps(
            minimized if minimized is not None else {},
            ensure_ascii=False,
            separators=(",", ":"),
            allow_nan=False,
        )
    except (TypeError, ValueError, RecursionError) as e:
        raise SnapshotEncodeError(f"snapshot is not serializable: {e}") from e


def _text_bytes(text: str) -> bytes:
    try:
        return text.encode(TEXT_ENCODING)
    except UnicodeEncodeError as e:
        raise SnapshotEncodeError(f"snapshot text is not valid {TEXT_ENCODING}: {e}") from e


def encode(snapshot: Union[GameStateSnapshot, Mapping[str, Any]]) -> str:
    text = dict_compress(compress_tokens(serialize_snapshot(snapshot)))
    return pack_to_symbols(_text_bytes(text))


def _unpack_text(code: str) -> str:
    if not isinstance(code, str):
        raise StructuralParseError("code must be str")
    try:
        return unpack_from_symbols(code.strip()).decode(TEXT_ENCODING)
    except UnicodeDecodeError as e:
        raise StructuralParseError(f"code is not valid {TEXT_ENCODING}: {e}") from e


def _parse_json(text: str) -> Dict[str, Any]:
    try:
        data = json.loads(text)
    except ValueError as e:
        raise StructuralParseError(f"invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise StructuralParseError(f"expected an object, got {type(data).__name__}")
    return data


def decode_or_raise(code: str) -> GameStateSnapshot:
    text = decompress_tokens(dict_decompress(_unpack_text(code), strict=True))
    wire = restore(_parse_json(text), canonical_defaults())
    snapshot = snapshot_from_wire(wire)
    snapshot.screen = RESUME_SCREEN
    return snapshot


def decode(code: str) -> DecodeResult:
    try:
        return DecodeResult.success(decode_or_raise(code))
    except (SaveCodeError, RecursionError) as e:
        log.debug("decode failed: %s", e)
        return DecodeResult.failure(str(e))


def try_decode(code: str) -> Optional[GameStateSnapshot]:
    return decode(code).snapshot


def decode_stages(code: str) -> Dict[str, Any]:
    """Intermediate text of every decode stage, for inspection tools.

    Stops at the first failing stage and records its error under "error".
    """
    stages: Dict[str, Any] = {}
    try:
        text = _unpack_text(code)
        stages["packed_text"] = text
        if text.startswith(DICT_START):
            stages["dictionary"] = parse_header(text)[0]
        text = dict_decompress(text, strict=True)
        stages["token_text"] = text
        text = decompress_tokens(text)
        stages["json"] = text
        stages["wire"] = _parse_json(text)
        stages["snapshot"] = decode_or_raise(code).to_dict()
    except (SaveCodeError, RecursionError) as e:
        stages["error"] = str(e)
    return stages


def code_stats(snapshot: Union[GameStateSnapshot, Mapping[str, Any]]) -> Dict[str, object]:
    """Size of the payload after each encode stage. Diagnostic only."""
    json_text = serialize_snapshot(snapshot)
    token_text = compress_tokens(json_text)
    dict_text = dict_compress(token_text)
    raw = _text_bytes(dict_text)
    code = pack_to_symbols(raw)
    entries = len(parse_header(dict_text)[0]) if dict_text.startswith(DICT_START) else 0
    gain_pct = 0.0
    if json_text:
        gain_pct = ((len(json_text) - len(code)) / float(len(json_text))) * 100.0
    return {
        "json_chars": len(json_text),
        "token_chars": len(token_text),
        "dict_chars": len(dict_text),
        "dict_entries": entries,
        "bytes": len(raw),
        "code_chars": len(code),
        "gain_pct": gain_pct,
    }
