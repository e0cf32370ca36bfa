from rest_framework import serializers

from .conf import get_setting
from .engine.abilities import EvolvesTo
from .engine.battle import MODE_COMBAT, MODE_REWARD
from .engine.contracts import Attribute, LootSelection, MonsterSelection
from .engine.progression import MAX_LEVEL
from .engine.rules import MAX_SAFE_INTEGER
from .models import CharacterRecord

ATTRIBUTE_CHOICES = [a.value for a in Attribute]


# =========================
# MODELS OUT
# =========================

class CharacterRecordSerializer(serializers.ModelSerializer):
    class Meta:
        model = CharacterRecord
        fields = [
            "id", "name", "header_image_url", "level", "xp", "credits", "class_name",
            "attributes", "abilities", "inventory", "history", "quests", "updated_at",
        ]
        read_only_fields = fields


# plain dicts for engine objects (no model behind them)

def ability_to_dict(ability) -> dict:
    return {
        "id": ability.id,
        "name": ability.name,
        "description": ability.description,
        "max_level": ability.max_level,
        "evolves_to": ability.evolution.ability_id if isinstance(ability.evolution, EvolvesTo) else None,
        "tiers": [tier_to_dict(t) for t in ability.tiers],
    }


def tier_to_dict(tier) -> dict | None:
    if tier is None:
        return None
    return {
        "level": tier.level,
        "effect_description": tier.effect_description,
        "cooldown": tier.cooldown,
        "duration": tier.duration,
    }


def class_to_dict(cls) -> dict:
    return {
        "name": cls.name,
        "description": cls.description,
        "starting_item": cls.starting_item,
        "primary_attribute": cls.primary_attribute.value,
        "secondary_attribute": cls.secondary_attribute.value,
        "abilities": [a.name for a in cls.abilities],
        "upgrades": list(cls.upgrades),
    }


def monster_to_dict(monster) -> dict:
    return {
        "id": monster.id,
        "name": monster.name,
        "description": monster.description,
        "level": monster.level,
        "rank": monster.rank,
        "xp_reward": monster.xp_reward,
        "credits": monster.credits,
        "stats": {Attribute(k).value: v for k, v in monster.stats.items()},
        "abilities": list(monster.abilities),
    }


def level_up_to_dict(level_up) -> dict:
    return {
        "old_level": level_up.old_level,
        "new_level": level_up.new_level,
        "leveled": level_up.leveled,
        "attribute_points": level_up.attribute_points,
        "ability_points": level_up.ability_points,
        "unlocks": list(level_up.unlocks),
    }


# =========================
# REQUESTS IN
# =========================

class CharacterCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=120, required=False, allow_blank=True)


class AttributeChangeSerializer(serializers.Serializer):
    attribute = serializers.ChoiceField(choices=ATTRIBUTE_CHOICES)
    delta = serializers.IntegerField()


class AbilityChangeSerializer(serializers.Serializer):
    ability = serializers.CharField(max_length=120)
    delta = serializers.IntegerField()


class AbilityDiskSerializer(serializers.Serializer):
    ability = serializers.CharField(max_length=120)


class EvolveSerializer(serializers.Serializer):
    ability_id = serializers.CharField(max_length=120)


class ClassSelectSerializer(serializers.Serializer):
    class_name = serializers.CharField(max_length=60)


class LevelAdjustSerializer(serializers.Serializer):
    delta = serializers.IntegerField(min_value=-MAX_LEVEL, max_value=MAX_LEVEL)


class MonsterSelectionSerializer(serializers.Serializer):
    monster_id = serializers.CharField(max_length=60)
    quantity = serializers.IntegerField(min_value=1, max_value=MAX_SAFE_INTEGER, default=1)


class LootSelectionSerializer(serializers.Serializer):
    item = serializers.CharField(max_length=120, allow_blank=True)
    quantity = serializers.IntegerField(min_value=1, max_value=MAX_SAFE_INTEGER, default=1)


class BattleCalculateSerializer(serializers.Serializer):
    mode = serializers.ChoiceField(choices=[MODE_COMBAT, MODE_REWARD], default=MODE_COMBAT)
    party_size = serializers.IntegerField(min_value=1, default=1)
    monsters = MonsterSelectionSerializer(many=True, required=False, default=list)
    loot = LootSelectionSerializer(many=True, required=False, default=list)

    # reward mode only
    xp = serializers.IntegerField(min_value=0, max_value=MAX_SAFE_INTEGER, default=0)
    credits = serializers.IntegerField(min_value=0, max_value=MAX_SAFE_INTEGER, default=0)
    description = serializers.CharField(max_length=300, required=False, allow_blank=True, default="")

    chapter_ref = serializers.CharField(max_length=120, required=False, allow_blank=True, default="")

    def validate_party_size(self, value):
        limit = get_setting("MAX_PARTY_SIZE")
        if value > limit:
            raise serializers.ValidationError(f"Party size is capped at {limit}.")
        return value

    def monster_selections(self) -> list[MonsterSelection]:
        return [MonsterSelection(m["monster_id"], m["quantity"]) for m in self.validated_data["monsters"]]

    def loot_selections(self) -> list[LootSelection]:
        return [LootSelection(row["item"], row["quantity"]) for row in self.validated_data["loot"]]
