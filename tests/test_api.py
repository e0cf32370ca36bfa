"""HTTP surface: DRF views over the stored character."""

import json

import pytest
from django.urls import reverse

from litrpg.engine.progression import MAX_LEVEL
from litrpg.models import CharacterRecord, MonsterEntry, PendingReward


@pytest.fixture
def record(db):
    from litrpg.engine import default_character
    rec = CharacterRecord.from_engine(default_character())
    rec.save()
    return rec


def _post(client, name, pk, payload, **kwargs):
    return client.post(reverse(name, kwargs={"pk": pk, **kwargs}), payload, format="json")


class TestCharacters:
    def test_create_default(self, api_client):
        resp = api_client.post(reverse("character-list"), {}, format="json")
        assert resp.status_code == 201
        ch = resp.json()["character"]
        assert ch["name"] == "Operative-7"
        assert ch["class_name"] == "Recruit"
        assert ch["inventory"] == ["Standard Issue Kinetic Pistol"]
        assert ch["derived"]["available_attribute_points"] == 0

    def test_create_named(self, api_client):
        resp = api_client.post(reverse("character-list"), {"name": "Kade"}, format="json")
        assert resp.json()["character"]["name"] == "Kade"

    def test_detail_has_derived_values(self, api_client, record):
        data = api_client.get(reverse("character-detail", kwargs={"pk": record.pk})).json()
        derived = data["derived"]
        assert derived["next_class_level"] == 10
        assert derived["xp"]["next_level_xp"] == 200
        assert derived["kit"][0]["name"] == "Ranged Weapons Familiarity"
        assert derived["kit"][0]["current_tier"] is None
        assert derived["kit"][0]["next_tier"]["duration"] == "Instant"

    def test_owned_characters_are_hidden(self, api_client, django_user_model):
        owner = django_user_model.objects.create_user("someone", password="pw")
        rec = CharacterRecord.objects.create(owner=owner, name="Private")
        resp = api_client.get(reverse("character-detail", kwargs={"pk": rec.pk}))
        assert resp.status_code == 404


class TestSheetActions:
    def test_attribute_refusal_is_noop(self, api_client, record):
        resp = _post(api_client, "character-attributes", record.pk, {"attribute": "STR", "delta": 1})
        assert resp.status_code == 200
        record.refresh_from_db()
        assert record.attributes["STR"] == 3

    def test_bad_attribute_name(self, api_client, record):
        resp = _post(api_client, "character-attributes", record.pk, {"attribute": "LUCK", "delta": 1})
        assert resp.status_code == 400
        assert resp.json()["ok"] is False

    def test_install_disk(self, api_client, record):
        resp = _post(api_client, "character-install-disk", record.pk, {"ability": "Eagle Eye"})
        assert resp.status_code == 200
        record.refresh_from_db()
        assert record.abilities == {"Eagle Eye": 1}
        assert record.history[0] == "Installed Ability Disk: Eagle Eye"

    def test_class_locked_maps_to_400(self, api_client, record):
        resp = _post(api_client, "character-class", record.pk, {"class_name": "Scout"})
        assert resp.status_code == 400
        assert resp.json() == {"ok": False, "error": "Next class upgrade available at Level 10.", "code": "CLASS_LOCKED"}

    def test_level_then_class(self, api_client, record):
        _post(api_client, "character-level", record.pk, {"delta": 9})
        resp = _post(api_client, "character-class", record.pk, {"class_name": "Scout"})
        assert resp.status_code == 200
        record.refresh_from_db()
        assert record.level == 10
        assert record.class_name == "Scout"
        assert "Energy Dagger" in record.inventory

    @pytest.mark.parametrize("delta", [6000, -6000])
    def test_level_delta_out_of_range(self, api_client, record, delta):
        resp = _post(api_client, "character-level", record.pk, {"delta": delta})
        assert resp.status_code == 400
        record.refresh_from_db()
        assert record.level == 1

    def test_level_stops_at_cap(self, api_client, record):
        resp = _post(api_client, "character-level", record.pk, {"delta": MAX_LEVEL})
        assert resp.status_code == 200
        record.refresh_from_db()
        assert record.level == MAX_LEVEL
        assert api_client.get(reverse("character-detail", kwargs={"pk": record.pk})).status_code == 200


class TestBattleFlow:
    def test_calculate_queue_apply(self, api_client, record):
        resp = _post(api_client, "battle-log", record.pk, {
            "mode": "reward",
            "xp": 250,
            "credits": 40,
            "description": "Rescued the courier",
            "loot": [{"item": "Energy Cell", "quantity": 2}],
            "chapter_ref": "Ch. 2",
        })
        assert resp.status_code == 201
        entry = resp.json()["entry"]
        assert entry["loot_summary"] == "Energy Cell (x2)"

        pending = api_client.get(reverse("battle-log", kwargs={"pk": record.pk})).json()["pending"]
        assert [e["id"] for e in pending] == [entry["id"]]

        resp = api_client.post(reverse("battle-apply", kwargs={"pk": record.pk, "entry_id": entry["id"]}))
        assert resp.status_code == 200
        body = resp.json()
        assert body["level_up"]["new_level"] == 2
        assert body["history_line"] == (
            "Event: [Ch. 2] Rescued the courier. Rewards: 250 XP, 40 Credits. Loot: Energy Cell (x2)."
        )
        assert body["pending"] == []

        record.refresh_from_db()
        assert (record.xp, record.level, record.credits) == (250, 2, 40)
        assert record.inventory.count("Energy Cell") == 2

    def test_combat_with_custom_monster(self, api_client, record):
        MonsterEntry.objects.create(code="rat", name="Tunnel Rat", level=1, rank="Regular", xp_reward=10, credits=4)
        resp = _post(api_client, "battle-log", record.pk, {
            "mode": "combat",
            "monsters": [{"monster_id": "rat", "quantity": 3}],
        })
        assert resp.status_code == 201
        entry = resp.json()["entry"]
        assert entry["description"] == "Defeated: 3x Tunnel Rat"
        assert entry["credits"] == 12

    def test_nothing_to_log(self, api_client, record):
        resp = _post(api_client, "battle-log", record.pk, {"mode": "combat", "monsters": [{"monster_id": "ghost"}]})
        assert resp.status_code == 400
        assert resp.json()["code"] == "NOTHING_TO_LOG"

    def test_party_size_cap(self, api_client, record, settings):
        settings.LITRPG = {"MAX_PARTY_SIZE": 4}
        resp = _post(api_client, "battle-log", record.pk, {"mode": "reward", "xp": 10, "party_size": 5})
        assert resp.status_code == 400

    def test_apply_unknown_entry(self, api_client, record):
        resp = api_client.post(reverse("battle-apply", kwargs={"pk": record.pk, "entry_id": 12345}))
        assert resp.status_code == 400
        assert resp.json()["code"] == "NO_SUCH_ENTRY"
        record.refresh_from_db()
        assert record.xp == 0

    def test_discard(self, api_client, record):
        entry = _post(api_client, "battle-log", record.pk, {"mode": "reward", "xp": 5}).json()["entry"]
        resp = api_client.delete(reverse("battle-discard", kwargs={"pk": record.pk, "entry_id": entry["id"]}))
        assert resp.json()["pending"] == []
        record.refresh_from_db()
        assert record.xp == 0

    def test_second_apply_of_same_entry_is_refused(self, api_client, record):
        entry = _post(api_client, "battle-log", record.pk, {"mode": "reward", "xp": 50, "credits": 7}).json()["entry"]
        url = reverse("battle-apply", kwargs={"pk": record.pk, "entry_id": entry["id"]})

        assert api_client.post(url).status_code == 200
        resp = api_client.post(url)
        assert resp.status_code == 400
        assert resp.json()["code"] == "NO_SUCH_ENTRY"

        record.refresh_from_db()
        assert (record.xp, record.credits) == (50, 7)
        assert len(record.history) == 1

    def test_pending_rows_follow_the_queue(self, api_client, record):
        first = _post(api_client, "battle-log", record.pk, {"mode": "reward", "xp": 1}).json()["entry"]
        second = _post(api_client, "battle-log", record.pk, {"mode": "reward", "xp": 2}).json()["entry"]
        assert first["id"] != second["id"]
        assert set(record.pending_rewards.values_list("entry_id", flat=True)) == {first["id"], second["id"]}

        api_client.post(reverse("battle-apply", kwargs={"pk": record.pk, "entry_id": first["id"]}))
        assert list(record.pending_rewards.values_list("entry_id", flat=True)) == [second["id"]]

    def test_full_log_refuses_new_results(self, api_client, record, settings):
        settings.LITRPG = {"BATTLE_LOG_LIMIT": 1}
        kept = _post(api_client, "battle-log", record.pk, {"mode": "reward", "xp": 10}).json()["entry"]

        resp = _post(api_client, "battle-log", record.pk, {"mode": "reward", "xp": 20})
        assert resp.status_code == 400
        assert resp.json()["code"] == "BATTLE_LOG_FULL"

        pending = api_client.get(reverse("battle-log", kwargs={"pk": record.pk})).json()["pending"]
        assert [e["id"] for e in pending] == [kept["id"]]

    def test_import_clears_pending(self, api_client, record):
        _post(api_client, "battle-log", record.pk, {"mode": "reward", "xp": 10})
        doc = api_client.get(reverse("character-export", kwargs={"pk": record.pk})).json()
        assert _post(api_client, "character-import", record.pk, doc).status_code == 200
        assert not PendingReward.objects.filter(character=record).exists()


class TestSaveFiles:
    def test_export_import_round_trip(self, api_client, record):
        resp = api_client.get(reverse("character-export", kwargs={"pk": record.pk}))
        assert resp.status_code == 200
        assert "Operative-7_SaveData.json" in resp["Content-Disposition"]
        doc = resp.json()
        doc["character"]["credits"] = 999

        resp = _post(api_client, "character-import", record.pk, doc)
        assert resp.status_code == 200
        record.refresh_from_db()
        assert record.credits == 999

    def test_import_as_text(self, api_client, record):
        doc = api_client.get(reverse("character-export", kwargs={"pk": record.pk})).json()
        doc["character"]["name"] = "Renamed"
        resp = _post(api_client, "character-import", record.pk, {"save": json.dumps(doc)})
        assert resp.status_code == 200
        record.refresh_from_db()
        assert record.name == "Renamed"

    @pytest.mark.parametrize("payload", [
        {"save": "{broken"},
        {"character": {"name": "X", "className": "Wizard", "level": 1, "xp": 0}},
        {"character": {"name": "X", "className": "Recruit", "level": -1, "xp": 0}},
        {"character": {"name": "X", "className": "Recruit", "level": 6000, "xp": 0}},
        {"character": {"name": "X", "className": "Recruit", "level": 1, "xp": 2 ** 60}},
    ])
    def test_bad_import_leaves_character_alone(self, api_client, record, payload):
        resp = _post(api_client, "character-import", record.pk, payload)
        assert resp.status_code == 400
        assert resp.json()["ok"] is False
        record.refresh_from_db()
        assert record.name == "Operative-7"
        assert record.level == 1

    def test_import_brings_monsters(self, api_client, record):
        doc = api_client.get(reverse("character-export", kwargs={"pk": record.pk})).json()
        doc["monsters"] = [{
            "id": "m9", "name": "Void Leech", "level": 4, "rank": "Champion",
            "xpReward": 21, "credits": 53, "stats": {}, "abilities": [],
        }]
        _post(api_client, "character-import", record.pk, doc)
        assert MonsterEntry.objects.get(code="m9").name == "Void Leech"

    def test_status_sheet_download(self, api_client, record):
        resp = api_client.get(reverse("character-status-sheet", kwargs={"pk": record.pk}))
        assert resp.status_code == 200
        assert resp["Content-Type"].startswith("text/markdown")
        assert "Operative-7_Status.md" in resp["Content-Disposition"]
        assert resp.content.decode().startswith("[Status]")


class TestCatalogs:
    def test_monsters_include_custom(self, api_client):
        MonsterEntry.objects.create(code="boss1", name="Hive Queen", level=20, rank="Boss")
        data = api_client.get(reverse("monster-list")).json()
        ids = {m["id"] for m in data}
        assert {"m1", "m2", "boss1"} <= ids
        queen = next(m for m in data if m["id"] == "boss1")
        assert queen["xp_reward"] > 0
        assert queen["credits"] > 0

    def test_classes(self, api_client):
        data = api_client.get(reverse("class-list")).json()
        assert len(data) == 21

    def test_abilities_show_evolution(self, api_client):
        data = {a["id"]: a for a in api_client.get(reverse("ability-list")).json()}
        assert data["light_armor_familiarity"]["evolves_to"] == "ghost_protocol"

    def test_loot(self, api_client):
        data = api_client.get(reverse("loot-list")).json()
        assert data == sorted(data)
        assert "Power Core" in data

    def test_disk_candidates(self, api_client, record):
        url = reverse("character-disk-candidates", kwargs={"pk": record.pk})
        data = api_client.get(url, {"search": "ghost"}).json()
        assert [a["name"] for a in data] == ["Ghost Protocol"]
