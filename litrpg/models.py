from django.apps import apps
from django.contrib.auth.models import User
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models, transaction

from .engine.battle import apply_entry, queue_entry
from .engine.catalog import calculate_monster_credits, calculate_monster_xp
from .engine.contracts import Attribute, BattleLogEntry, Character, Monster, MONSTER_RANKS, base_attributes
from .engine.progression import MAX_LEVEL


class CharacterQuerySet(models.QuerySet):
    def visible_to(self, user):
        """Unowned sheets are shared; owned ones only show up for their owner."""
        if user is not None and user.is_authenticated:
            return self.filter(models.Q(owner__isnull=True) | models.Q(owner=user))
        return self.filter(owner__isnull=True)


class CharacterRecord(models.Model):
    """
    One stored character sheet. The engine never sees this row, only the
    Character built by to_engine(); load_from() copies a result back.
    """
    owner = models.ForeignKey(User, null=True, blank=True, related_name="characters", on_delete=models.CASCADE)

    name = models.CharField(max_length=120)
    header_image_url = models.CharField(max_length=500, null=True, blank=True)

    level = models.IntegerField(default=1)
    xp = models.BigIntegerField(default=0)
    credits = models.BigIntegerField(default=0)
    class_name = models.CharField(max_length=60, default="Recruit")

    # JSON columns hold the same shapes the save file uses
    attributes = models.JSONField(default=dict)   # {"STR": 3, ...}
    abilities = models.JSONField(default=dict)    # {"Eagle Eye": 2}
    inventory = models.JSONField(default=list)
    history = models.JSONField(default=list)      # newest first
    quests = models.JSONField(default=list, blank=True)

    updated_at = models.DateTimeField(auto_now=True)

    objects = CharacterQuerySet.as_manager()

    class Meta:
        ordering = ["name", "id"]

    def __str__(self):
        return f"{self.name} (Lvl {self.level} {self.class_name})"

    def to_engine(self) -> Character:
        attrs = base_attributes()
        attrs.update({Attribute(k): int(v) for k, v in (self.attributes or {}).items()})
        return Character(
            name=self.name,
            level=self.level,
            xp=self.xp,
            credits=self.credits,
            class_name=self.class_name,
            attributes=attrs,
            abilities={k: int(v) for k, v in (self.abilities or {}).items()},
            inventory=tuple(self.inventory or ()),
            history=tuple(self.history or ()),
            header_image_url=self.header_image_url,
        )

    def load_from(self, character: Character) -> None:
        self.name = character.name
        self.level = character.level
        self.xp = character.xp
        self.credits = character.credits
        self.class_name = character.class_name
        self.attributes = {Attribute(k).value: v for k, v in character.attributes.items()}
        self.abilities = dict(character.abilities)
        self.inventory = list(character.inventory)
        self.history = list(character.history)
        self.header_image_url = character.header_image_url

    @classmethod
    def from_engine(cls, character: Character, owner=None) -> "CharacterRecord":
        record = cls(owner=owner)
        record.load_from(character)
        return record


class MonsterEntry(models.Model):
    """
    Admin-made monsters, layered over the built-in bestiary.
    Leave xp_reward / credits empty to derive them from level and rank.
    """
    RANK_CHOICES = [(r, r) for r in MONSTER_RANKS]

    code = models.CharField(max_length=60, unique=True)  # the id battle requests use
    name = models.CharField(max_length=120)
    description = models.TextField(blank=True)

    level = models.IntegerField(default=1, validators=[MinValueValidator(1), MaxValueValidator(MAX_LEVEL)])
    rank = models.CharField(max_length=20, choices=RANK_CHOICES, default="Regular")
    xp_reward = models.IntegerField(null=True, blank=True)
    credits = models.IntegerField(null=True, blank=True)

    stats = models.JSONField(default=dict, blank=True)
    abilities = models.JSONField(default=list, blank=True)

    class Meta:
        ordering = ["level", "name"]

    def __str__(self):
        return f"{self.name} (Lvl {self.level} {self.rank})"

    def save(self, *args, **kwargs):
        if self.xp_reward is None:
            self.xp_reward = calculate_monster_xp(self.level, self.rank)
        if self.credits is None:
            self.credits = calculate_monster_credits(self.xp_reward)
        super().save(*args, **kwargs)

    def to_engine(self) -> Monster:
        return Monster(
            id=self.code,
            name=self.name,
            level=self.level,
            rank=self.rank,
            xp_reward=self.xp_reward or 0,
            credits=self.credits or 0,
            description=self.description,
            stats={Attribute(k): int(v) for k, v in (self.stats or {}).items() if k in Attribute.__members__},
            abilities=tuple(self.abilities or ()),
        )

    @classmethod
    def from_engine(cls, monster: Monster) -> "MonsterEntry":
        return cls(
            code=monster.id,
            name=monster.name,
            description=monster.description,
            level=monster.level,
            rank=monster.rank,
            xp_reward=monster.xp_reward,
            credits=monster.credits,
            stats={Attribute(k).value: v for k, v in monster.stats.items()},
            abilities=list(monster.abilities),
        )


def get_registry(with_custom_monsters: bool = True):
    """The registry built at startup, plus MonsterEntry rows when asked."""
    registry = apps.get_app_config("litrpg").registry
    if not with_custom_monsters:
        return registry
    return registry.with_monsters(m.to_engine() for m in MonsterEntry.objects.all())


def update_character(queryset, pk, change) -> CharacterRecord:
    """
    Run change(Character) -> Character against a locked row and store the
    result. If change raises, nothing is written.
    """
    with transaction.atomic():
        record = queryset.select_for_update().get(pk=pk)
        updated = change(record.to_engine())
        if updated is not None:
            record.load_from(updated)
            record.save()
    return record


class PendingReward(models.Model):
    """
    A calculated battle/event result waiting to be applied or discarded.
    Kept apart from the sheet itself; only apply touches both.
    """
    character = models.ForeignKey(CharacterRecord, related_name="pending_rewards", on_delete=models.CASCADE)
    entry_id = models.BigIntegerField()  # ms timestamp, bumped on collision

    xp = models.BigIntegerField(default=0)
    credits = models.BigIntegerField(default=0)
    description = models.CharField(max_length=300)
    loot = models.JSONField(default=list, blank=True)   # flat, one name per item
    loot_summary = models.TextField(blank=True)
    timestamp = models.BigIntegerField(default=0)
    chapter_ref = models.CharField(max_length=120, blank=True)

    class Meta:
        ordering = ["-id"]  # newest first
        unique_together = [("character", "entry_id")]

    def __str__(self):
        return f"{self.character.name}: {self.description} ({self.xp} XP)"

    def to_engine(self) -> BattleLogEntry:
        return BattleLogEntry(
            id=self.entry_id,
            xp=self.xp,
            credits=self.credits,
            description=self.description,
            loot=tuple(self.loot or ()),
            loot_summary=self.loot_summary,
            timestamp=self.timestamp,
            chapter_ref=self.chapter_ref,
        )

    @classmethod
    def from_engine(cls, character: CharacterRecord, entry: BattleLogEntry) -> "PendingReward":
        return cls(
            character=character,
            entry_id=entry.id,
            xp=entry.xp,
            credits=entry.credits,
            description=entry.description,
            loot=list(entry.loot),
            loot_summary=entry.loot_summary,
            timestamp=entry.timestamp,
            chapter_ref=entry.chapter_ref,
        )


def pending_entries(record: CharacterRecord) -> list[BattleLogEntry]:
    return [row.to_engine() for row in record.pending_rewards.all()]


# =========================
# LOCKED WRITES
# =========================
# Each helper locks the character row first, so two requests for the same
# character run one after the other and the second sees the first's result.

def queue_pending_entry(queryset, pk, entry: BattleLogEntry, limit=None) -> BattleLogEntry:
    """Store a calculated result. Raises RuleError BATTLE_LOG_FULL at the cap."""
    with transaction.atomic():
        record = queryset.select_for_update().get(pk=pk)
        queued = queue_entry(pending_entries(record), entry, limit=limit)[0]
        PendingReward.from_engine(record, queued).save()
    return queued


def apply_pending_entry(queryset, pk, entry_id):
    """
    Apply one queued result: xp, level-ups, credits, history and loot land in
    a single save, and the pending row goes in the same transaction.
    Returns (record, remaining pending, LevelUp).
    """
    with transaction.atomic():
        record = queryset.select_for_update().get(pk=pk)
        updated, remaining, level_up = apply_entry(record.to_engine(), pending_entries(record), entry_id)
        record.load_from(updated)
        record.save()
        record.pending_rewards.filter(entry_id=entry_id).delete()

    return record, remaining, level_up


def discard_pending_entry(queryset, pk, entry_id) -> list[BattleLogEntry]:
    with transaction.atomic():
        record = queryset.select_for_update().get(pk=pk)
        record.pending_rewards.filter(entry_id=entry_id).delete()
        return pending_entries(record)
