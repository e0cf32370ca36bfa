"""Battle/reward calculator and the pending-result queue."""

import pytest

from litrpg.engine.battle import (
    apply_entry,
    calculate_combat,
    calculate_custom_reward,
    class_bonus_multiplier,
    compose_history_line,
    expand_loot,
    level_disparity_multiplier,
    queue_entry,
)
from litrpg.engine.contracts import BattleLogEntry, LootSelection, MonsterSelection
from litrpg.engine.rules import MAX_SAFE_INTEGER, RuleError

NOW = 1_700_000_000.0


class TestDisparity:
    @pytest.mark.parametrize("monster_level,character_level,expected", [
        (1, 20, 0.0),     # -19
        (4, 15, 0.0),     # -11
        (9, 15, 0.5),     # -6
        (10, 15, 0.8),    # -5
        (14, 15, 0.8),    # -1
        (15, 15, 1.0),
        (19, 15, 1.0),    # 4
        (20, 15, 1.2),    # 5
        (25, 15, 1.5),    # 10
        (29, 15, 1.5),    # 14
        (30, 15, 2.0),    # 15
        (40, 15, 2.0),    # 25
    ])
    def test_breakpoints(self, monster_level, character_level, expected):
        assert level_disparity_multiplier(monster_level, character_level) == expected


class TestCombat:
    def test_reference_example(self, registry, make_character, training_dummy):
        # Scout: PER primary, DEX secondary -> 1 + 0.10 + 0.6 * 0.05 = 1.13
        reg = registry.with_monsters([training_dummy])
        c = make_character(level=15, class_name="Scout", attrs={"PER": 10, "DEX": 5})
        assert class_bonus_multiplier(c, reg) == pytest.approx(1.13)

        entry = calculate_combat(c, reg, [MonsterSelection("dummy", 2)], party_size=2, now=NOW)
        assert entry.xp == 113
        assert entry.credits == 50
        assert entry.description == "Defeated: 2x Training Dummy"
        assert entry.id == int(NOW * 1000)

    def test_unknown_monsters_are_skipped(self, registry, make_character):
        c = make_character(level=2)
        entry = calculate_combat(
            c, registry,
            [MonsterSelection("nope", 3), None, MonsterSelection("m1", 1)],
            now=NOW,
        )
        assert entry.description == "Defeated: 1x Skitterbug"

    def test_nothing_resolved_returns_none(self, registry, character):
        assert calculate_combat(character, registry, [MonsterSelection("nope")]) is None
        assert calculate_combat(character, registry, []) is None

    def test_party_size_must_be_positive(self, registry, character):
        with pytest.raises(RuleError) as exc:
            calculate_combat(character, registry, [MonsterSelection("m1")], party_size=0)
        assert exc.value.code == "INVALID_PARTY_SIZE"

    def test_credits_floor_split(self, registry, make_character, training_dummy):
        reg = registry.with_monsters([training_dummy])
        c = make_character(level=15)
        entry = calculate_combat(c, reg, [MonsterSelection("dummy", 1)], party_size=3, now=NOW)
        assert entry.credits == 16

    def test_chapter_ref_and_loot(self, registry, make_character):
        c = make_character(level=2)
        entry = calculate_combat(
            c, registry, [MonsterSelection("m1")],
            loot=[LootSelection("Scrap Metal", 2)],
            chapter_ref=" Ch. 4 ",
            now=NOW,
        )
        assert entry.chapter_ref == "Ch. 4"
        assert entry.loot == ("Scrap Metal", "Scrap Metal")
        assert entry.loot_summary == "Scrap Metal (x2)"


class TestCustomReward:
    def test_split_floors_and_skips_class_bonus(self, registry):
        entry = calculate_custom_reward(registry, 101, 7, party_size=2, now=NOW)
        assert entry.xp == 50
        assert entry.credits == 3
        assert entry.description == "Custom Reward"

    def test_description_kept(self, registry):
        entry = calculate_custom_reward(registry, 10, 0, description="Quest: Rescue", now=NOW)
        assert entry.description == "Quest: Rescue"

    def test_negative_rejected(self, registry):
        with pytest.raises(RuleError) as exc:
            calculate_custom_reward(registry, -5, 0)
        assert exc.value.code == "NEGATIVE_REWARD"

    def test_oversized_reward_rejected(self, registry):
        with pytest.raises(RuleError) as exc:
            calculate_custom_reward(registry, MAX_SAFE_INTEGER + 1, 0)
        assert exc.value.code == "VALUE_TOO_LARGE"


class TestLoot:
    def test_flatten_and_summary(self, registry):
        flat, summary = expand_loot(
            [LootSelection("Energy Cell", 2), LootSelection("Power Core", 1)],
            registry.loot,
        )
        assert flat == ("Energy Cell", "Energy Cell", "Power Core")
        assert summary == "Energy Cell (x2), Power Core (x1)"

    def test_blank_and_unknown_items_dropped(self, registry):
        flat, summary = expand_loot(
            [LootSelection("", 3), LootSelection("Banana", 1), LootSelection("Energy Cell", 0)],
            registry.loot,
        )
        assert flat == ()
        assert summary == ""

    def test_without_catalog_anything_goes(self):
        flat, _ = expand_loot([LootSelection("Banana", 1)])
        assert flat == ("Banana",)


class TestHistoryLine:
    def test_battle_with_chapter_and_loot(self):
        entry = BattleLogEntry(
            id=1, xp=113, credits=50, description="Defeated: 2x Scrap Bot",
            loot=("Energy Cell",), loot_summary="Energy Cell (x1)", chapter_ref="Ch. 3",
        )
        assert compose_history_line(entry) == (
            "Battle: [Ch. 3] Defeated: 2x Scrap Bot. Rewards: 113 XP, 50 Credits. Loot: Energy Cell (x1)."
        )

    def test_event_without_extras(self):
        entry = BattleLogEntry(id=1, xp=10, credits=0, description="Custom Reward")
        assert compose_history_line(entry) == "Event: Custom Reward. Rewards: 10 XP, 0 Credits."


class TestApply:
    def _entry(self, entry_id=1, xp=250, credits=40):
        return BattleLogEntry(
            id=entry_id, xp=xp, credits=credits, description="Defeated: 1x Scrap Bot",
            loot=("Energy Cell", "Energy Cell"), loot_summary="Energy Cell (x2)",
        )

    def test_everything_lands_together(self, character):
        pending = [self._entry(1), self._entry(2, xp=5)]
        updated, remaining, level_up = apply_entry(character, pending, 1)

        assert updated.xp == 250
        assert updated.level == 2
        assert updated.credits == 40
        assert updated.inventory[-2:] == ("Energy Cell", "Energy Cell")
        assert updated.history[0].startswith("Battle: Defeated: 1x Scrap Bot.")
        assert [e.id for e in remaining] == [2]
        assert level_up.leveled

    def test_missing_entry_changes_nothing(self, character):
        pending = [self._entry(1)]
        with pytest.raises(RuleError) as exc:
            apply_entry(character, pending, 99)
        assert exc.value.code == "NO_SUCH_ENTRY"
        assert character.xp == 0
        assert len(pending) == 1

    def test_credits_past_counter_cap_rejected(self, make_character):
        rich = make_character(credits=MAX_SAFE_INTEGER)
        with pytest.raises(RuleError) as exc:
            apply_entry(rich, [self._entry(1)], 1)
        assert exc.value.code == "VALUE_TOO_LARGE"


class TestQueue:
    def test_newest_first_and_unique_ids(self):
        a = BattleLogEntry(id=100, xp=1, credits=0, description="a")
        b = BattleLogEntry(id=100, xp=2, credits=0, description="b")
        pending = queue_entry([], a)
        pending = queue_entry(pending, b)
        assert [e.description for e in pending] == ["b", "a"]
        assert len({e.id for e in pending}) == 2

    def test_full_queue_refuses_and_keeps_everything(self):
        pending = []
        for i in range(3):
            pending = queue_entry(pending, BattleLogEntry(id=i, xp=i, credits=0, description=str(i)), limit=3)
        with pytest.raises(RuleError) as exc:
            queue_entry(pending, BattleLogEntry(id=9, xp=9, credits=0, description="9"), limit=3)
        assert exc.value.code == "BATTLE_LOG_FULL"
        assert [e.id for e in pending] == [2, 1, 0]

    def test_no_limit(self):
        pending = []
        for i in range(60):
            pending = queue_entry(pending, BattleLogEntry(id=i, xp=0, credits=0, description=""))
        assert len(pending) == 60
