#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import dataclasses
import unittest
from concurrent.futures import ThreadPoolExecutor

from savecode import (
    DecodeResult,
    GameStateSnapshot,
    Item,
    ItemStats,
    ItemValidationWarning,
    Loadout,
    SettingsBlock,
    SnapshotEncodeError,
    StatBlock,
    code_stats,
    decode,
    encode,
    try_decode,
)
from savecode.alphabet import SYMBOL_INDEX
from savecode.bitpack import pack_to_symbols
from savecode.codec import decode_stages, serialize_snapshot


def _item(item_id: str, **kw) -> Item:
    base = dict(
        id=item_id,
        name="Neon Sword",
        type="weapon",
        rarity="rare",
        stats=ItemStats(damage=10),
        price=30,
        description="",
    )
    base.update(kw)
    return Item(**base)


def _full_snapshot() -> GameStateSnapshot:
    return GameStateSnapshot(
        level=7,
        stats=StatBlock(hp=80, max_hp=120, coins=345, damage=14, speed=1.25, vision_radius=4.5),
        inventory=[
            _item("sword_1"),
            _item("tilde", name="Tilde~Blade ~I2", rarity="epic", stats=ItemStats(damage=3, speed=0.5), price=14),
            _item("potion", name="Épée ☆ \"Quoted\"", type="consumable", rarity="common", stats=ItemStats(heal=25), price=50),
            _item("scroll", name="Old Scroll", type="consumable", rarity="common", stats=None, price=0),
        ],
        loadout=Loadout(
            weapon=_item("axe", name="Axe", rarity="legendary", stats=ItemStats(damage=5, defense=3), price=48),
            armor=None,
            utility=_item("lamp", name="Lamp", type="utility", stats=ItemStats(vision=2), price=6),
        ),
        active_mods=["glass_cannon", "speed_demon"],
        boss_drops=[_item("crown", name="Crown", type="armor", rarity="epic", stats=ItemStats(defense=6), price=24)],
        settings=SettingsBlock(music_volume=0.2, sfx_volume=0.9, joystick_position="right", mobile_control_type="joystick"),
    )


class RoundTripTests(unittest.TestCase):
    def test_default_snapshot_is_three_symbols(self) -> None:
        snapshot = GameStateSnapshot()
        self.assertEqual(serialize_snapshot(snapshot), "{}")
        code = encode(snapshot)
        self.assertEqual(len(code), 3)
        result = decode(code)
        self.assertTrue(result.ok)
        self.assertEqual(result.snapshot.level, 1)
        self.assertEqual(result.snapshot.stats, StatBlock())
        self.assertEqual(result.snapshot.settings, SettingsBlock())
        self.assertEqual(result.snapshot.inventory, [])
        self.assertEqual(result.snapshot.screen, "lobby")

    def test_full_snapshot_roundtrip(self) -> None:
        original = _full_snapshot()
        code = encode(original)
        self.assertTrue(all(ch in SYMBOL_INDEX for ch in code))
        result = decode(code)
        self.assertTrue(result.ok, result.reason)
        self.assertEqual(result.snapshot, dataclasses.replace(original, screen="lobby"))

    def test_screen_is_not_encoded(self) -> None:
        snapshot = _full_snapshot()
        self.assertEqual(encode(snapshot), encode(dataclasses.replace(snapshot, screen="shop")))

    def test_description_and_stale_price_are_not_kept(self) -> None:
        snapshot = GameStateSnapshot(inventory=[_item("s", price=999, description="Sharp.")])
        restored = try_decode(encode(snapshot))
        self.assertEqual(restored.inventory[0].price, 30)
        self.assertEqual(restored.inventory[0].description, "")

    def test_encode_is_deterministic(self) -> None:
        snapshot = _full_snapshot()
        self.assertEqual(encode(snapshot), encode(_full_snapshot()))
        with ThreadPoolExecutor(max_workers=8) as pool:
            codes = list(pool.map(lambda _i: encode(snapshot), range(16)))
        self.assertEqual(set(codes), {encode(snapshot)})

    def test_dict_snapshot_matches_dataclass(self) -> None:
        snapshot = _full_snapshot()
        self.assertEqual(encode(snapshot.to_dict()), encode(snapshot))
        self.assertEqual(encode({"currentLevel": 4}), encode(GameStateSnapshot(level=4)))

    def test_invalid_item_is_dropped_and_rest_survives(self) -> None:
        snapshot = GameStateSnapshot(inventory=[_item("good"), Item(id="broken")])
        with self.assertWarns(ItemValidationWarning):
            code = encode(snapshot)
        restored = try_decode(code)
        self.assertEqual([i.id for i in restored.inventory], ["good"])


class DecodeFailureTests(unittest.TestCase):
    def assertInvalid(self, code) -> DecodeResult:
        result = decode(code)
        self.assertFalse(result.ok)
        self.assertIsNone(result.snapshot)
        self.assertTrue(result.reason)
        self.assertIsNone(try_decode(code))
        return result

    def test_unknown_symbols(self) -> None:
        result = self.assertInvalid("∎∎∎")
        self.assertIn("position 0", result.reason)

    def test_empty_and_non_string(self) -> None:
        self.assertInvalid("")
        self.assertInvalid(12345)
        self.assertInvalid(None)

    def test_truncated_code(self) -> None:
        code = encode(_full_snapshot())
        self.assertInvalid(code[: len(code) // 2])

    def test_unterminated_dictionary(self) -> None:
        self.assertInvalid(pack_to_symbols("\x02abcd".encode("utf-8")))

    def test_dictionary_reference_out_of_range(self) -> None:
        self.assertInvalid(pack_to_symbols("\x02abcd\x03{\x01!\x01}".encode("utf-8")))

    def test_not_an_object(self) -> None:
        self.assertInvalid(pack_to_symbols(b"[1,2]"))
        self.assertInvalid(pack_to_symbols(b"not json"))

    def test_item_missing_fields(self) -> None:
        self.assertInvalid(pack_to_symbols(b'{"I":[{"i":"x"}]}'))

    def test_wrong_field_types(self) -> None:
        self.assertInvalid(pack_to_symbols(b'{"l":-2}'))
        self.assertInvalid(pack_to_symbols(b'{"l":true}'))
        self.assertInvalid(pack_to_symbols(b'{"s":{"hp":"full"}}'))
        self.assertInvalid(pack_to_symbols(b'{"m":[1]}'))
        self.assertInvalid(pack_to_symbols(b'{"S":{"1":"loud"}}'))

    def test_invalid_utf8(self) -> None:
        result = self.assertInvalid(pack_to_symbols(b"\xff\xfe"))
        self.assertIn("utf-8", result.reason)

    def test_surrounding_whitespace_is_ignored(self) -> None:
        code = encode(GameStateSnapshot(level=9))
        self.assertEqual(try_decode(f"  {code}\n").level, 9)


    def test_non_finite_numbers(self) -> None:
        item = '{"I":[{"i":"a","n":"b","t":"weapon","r":"rare","s":{"d":%s}}]}'
        for number in ("NaN", "Infinity", "-Infinity", "1e400", "9" * 400):
            with self.subTest(number=number[:12]):
                self.assertInvalid(pack_to_symbols((item % number).encode("utf-8")))
        self.assertInvalid(pack_to_symbols(b'{"s":{"hp":NaN}}'))
        self.assertInvalid(pack_to_symbols(b'{"s":{"coins":1e400}}'))
        self.assertInvalid(pack_to_symbols(('{"S":{"1":%s}}' % ("9" * 400)).encode("utf-8")))

    def test_item_price_overflow(self) -> None:
        code = pack_to_symbols(b'{"I":[{"i":"a","n":"b","t":"weapon","r":"rare","s":{"d":1e308,"f":1e308}}]}')
        result = self.assertInvalid(code)
        self.assertIn("price", result.reason)


class EncodeErrorTests(unittest.TestCase):
    def test_stats_must_be_finite_numbers(self) -> None:
        for value in ("full", None, float("inf"), 10 ** 400, True):
            with self.subTest(value=type(value).__name__):
                with self.assertRaises(SnapshotEncodeError):
                    encode(GameStateSnapshot(stats=StatBlock(hp=value)))

    def test_settings_types(self) -> None:
        with self.assertRaises(SnapshotEncodeError):
            encode(GameStateSnapshot(settings=SettingsBlock(music_volume="loud")))
        with self.assertRaises(SnapshotEncodeError):
            encode(GameStateSnapshot(settings=SettingsBlock(joystick_position=None)))

    def test_mods_must_be_strings(self) -> None:
        with self.assertRaises(SnapshotEncodeError):
            encode(GameStateSnapshot(active_mods=[3]))
        with self.assertRaises(SnapshotEncodeError):
            encode({"activeMods": 5})

    def test_lone_surrogate(self) -> None:
        snapshot = GameStateSnapshot(active_mods=["\ud800"])
        with self.assertRaises(SnapshotEncodeError):
            encode(snapshot)
        with self.assertRaises(SnapshotEncodeError):
            code_stats(snapshot)

    def test_bad_item_fields(self) -> None:
        for stats in (ItemStats(damage="x"), ItemStats(speed=float("nan"))):
            with self.assertRaises(SnapshotEncodeError):
                encode(GameStateSnapshot(inventory=[_item("s", stats=stats)]))
        with self.assertRaises(SnapshotEncodeError):
            encode(GameStateSnapshot(inventory=[_item(5)]))

    def test_malformed_sections(self) -> None:
        for data in ({"stats": [1]}, {"settings": "x"}, {"loadout": 3}, {"inventory": {"id": "x"}}):
            with self.subTest(data=data):
                with self.assertRaises(SnapshotEncodeError):
                    encode(data)


    def test_bad_level(self) -> None:
        for level in (-1, "3", 2.5, True):
            with self.subTest(level=level):
                with self.assertRaises(SnapshotEncodeError):
                    encode(GameStateSnapshot(level=level))

    def test_non_finite_stat(self) -> None:
        with self.assertRaises(SnapshotEncodeError):
            encode(GameStateSnapshot(stats=StatBlock(hp=float("nan"))))

    def test_unserializable_values(self) -> None:
        cyclic: list = []
        cyclic.append(cyclic)
        with self.assertRaises(SnapshotEncodeError):
            encode(GameStateSnapshot(active_mods=cyclic))
        with self.assertRaises(SnapshotEncodeError):
            encode(GameStateSnapshot(active_mods=[object()]))

    def test_wrong_input_type(self) -> None:
        with self.assertRaises(SnapshotEncodeError):
            encode(["not", "a", "snapshot"])

    def test_encode_errors_are_value_errors(self) -> None:
        with self.assertRaises(ValueError):
            encode(GameStateSnapshot(level=-5))


class SnapshotDictTests(unittest.TestCase):
    def test_non_item_entries_are_dropped_with_warning(self) -> None:
        data = {
            "inventory": [_item("good").to_dict(), "junk", 7],
            "bossDrops": [None],
            "loadout": {"weapon": "sword"},
        }
        with self.assertLogs("savecode.snapshot", level="WARNING") as logs:
            with self.assertWarns(ItemValidationWarning):
                snapshot = GameStateSnapshot.from_dict(data)
        self.assertEqual(len(logs.output), 4)
        self.assertEqual([i.id for i in snapshot.inventory], ["good"])
        self.assertEqual(snapshot.boss_drops, [])
        self.assertIsNone(snapshot.loadout.weapon)


class DiagnosticsTests(unittest.TestCase):
    def test_code_stats_on_repetitive_inventory(self) -> None:
        snapshot = GameStateSnapshot(inventory=[_item(f"sword_{i}") for i in range(6)])
        stats = code_stats(snapshot)
        code = encode(snapshot)
        self.assertGreater(stats["dict_entries"], 0)
        self.assertEqual(stats["code_chars"], len(code))
        self.assertLess(stats["token_chars"], stats["json_chars"])
        self.assertLess(stats["dict_chars"], stats["token_chars"])
        self.assertLess(stats["code_chars"], stats["json_chars"])
        self.assertGreater(stats["gain_pct"], 0.0)

    def test_decode_stages(self) -> None:
        snapshot = GameStateSnapshot(inventory=[_item(f"sword_{i}") for i in range(6)], level=5)
        stages = decode_stages(encode(snapshot))
        self.assertNotIn("error", stages)
        self.assertTrue(stages["dictionary"])
        self.assertIn("~I2", stages["token_text"])
        self.assertEqual(stages["wire"]["l"], 5)
        self.assertEqual(stages["snapshot"]["level"], 5)
        self.assertEqual(stages["snapshot"]["screen"], "lobby")

    def test_decode_stages_stops_at_failure(self) -> None:
        stages = decode_stages(pack_to_symbols(b"[1]"))
        self.assertEqual(stages["json"], "[1]")
        self.assertNotIn("snapshot", stages)
        self.assertIn("error", stages)


if __name__ == "__main__":
    unittest.main()
