import json
import logging

from django.db import transaction
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from .conf import get_setting
from .engine import default_character
from .engine.battle import (
    MODE_COMBAT,
    calculate_combat,
    calculate_custom_reward,
)
from .engine.kits import get_kit_for, max_level_for, unlearned_abilities
from .engine.progression import (
    available_ability_points,
    available_attribute_points,
    xp_progress,
)
from .engine.rules import RuleError, get_class_unlock_level
from .engine.savefile import export_save, load_save, save_filename
from .engine.sheet import (
    adjust_level,
    can_evolve,
    change_ability_level,
    change_attribute,
    evolve_ability,
    install_ability_disk,
    select_class,
)
from .engine.stats import calc_modifiers, effective_tier
from .engine.status import render_status_sheet, status_filename
from .models import (
    CharacterRecord,
    MonsterEntry,
    apply_pending_entry,
    discard_pending_entry,
    get_registry,
    pending_entries,
    queue_pending_entry,
    update_character,
)
from .serializers import (
    AbilityChangeSerializer,
    AbilityDiskSerializer,
    AttributeChangeSerializer,
    BattleCalculateSerializer,
    CharacterCreateSerializer,
    CharacterRecordSerializer,
    ClassSelectSerializer,
    EvolveSerializer,
    LevelAdjustSerializer,
    ability_to_dict,
    class_to_dict,
    level_up_to_dict,
    monster_to_dict,
    tier_to_dict,
)

logger = logging.getLogger(__name__)


# =========================
# HELPERS
# =========================

def _rule_error(e: RuleError):
    return Response({"ok": False, "error": e.message, "code": e.code}, status=400)


def _invalid(serializer):
    return Response({"ok": False, "error": "Invalid request.", "fields": serializer.errors}, status=400)


def _characters(request):
    return CharacterRecord.objects.visible_to(request.user)


def _sheet(record: CharacterRecord, registry) -> dict:
    """Stored fields plus everything derived from them."""
    character = record.to_engine()

    kit = []
    for ab in get_kit_for(registry, character):
        level = character.abilities.get(ab.name, 0)
        kit.append({
            "id": ab.id,
            "name": ab.name,
            "description": ab.description,
            "level": level,
            "max_level": max_level_for(registry, ab.name),
            "can_evolve": can_evolve(character, registry, ab.id),
            "current_tier": tier_to_dict(effective_tier(ab, level, character.attributes)),
            "next_tier": tier_to_dict(effective_tier(ab, level + 1, character.attributes)),
        })

    data = CharacterRecordSerializer(record).data
    data["derived"] = {
        "available_attribute_points": available_attribute_points(character),
        "available_ability_points": available_ability_points(character),
        "xp": xp_progress(character),
        "modifiers": calc_modifiers(character.attributes),
        "next_class_level": get_class_unlock_level(character.class_name),
        "class_options": list(registry.get_class(character.class_name).upgrades),
        "kit": kit,
    }
    return data


def _sheet_action(request, pk, serializer_class, change):
    """Validate the body, run change(character, data) on the locked row, return the sheet."""
    serializer = serializer_class(data=request.data)
    if not serializer.is_valid():
        return _invalid(serializer)

    registry = get_registry(with_custom_monsters=False)
    get_object_or_404(_characters(request), pk=pk)
    try:
        record = update_character(
            _characters(request), pk,
            lambda c: change(c, registry, serializer.validated_data),
        )
    except RuleError as e:
        return _rule_error(e)

    return Response({"ok": True, "character": _sheet(record, registry)})


# =========================
# CHARACTERS
# =========================

@api_view(["GET", "POST"])
@permission_classes([AllowAny])
def character_list(request):
    if request.method == "GET":
        records = _characters(request)
        return Response(CharacterRecordSerializer(records, many=True).data)

    serializer = CharacterCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return _invalid(serializer)

    name = (serializer.validated_data.get("name") or "").strip()
    character = default_character(name) if name else default_character()
    owner = request.user if request.user.is_authenticated else None

    record = CharacterRecord.from_engine(character, owner=owner)
    record.save()
    logger.info("created character %s (#%s)", record.name, record.pk)

    return Response({"ok": True, "character": _sheet(record, get_registry(False))}, status=201)


@api_view(["GET"])
@permission_classes([AllowAny])
def character_detail(request, pk):
    record = get_object_or_404(_characters(request), pk=pk)
    return Response(_sheet(record, get_registry(False)))


@api_view(["POST"])
@permission_classes([AllowAny])
def character_attributes(request, pk):
    return _sheet_action(
        request, pk, AttributeChangeSerializer,
        lambda c, reg, d: change_attribute(c, d["attribute"], d["delta"]),
    )


@api_view(["POST"])
@permission_classes([AllowAny])
def character_abilities(request, pk):
    return _sheet_action(
        request, pk, AbilityChangeSerializer,
        lambda c, reg, d: change_ability_level(c, reg, d["ability"], d["delta"]),
    )


@api_view(["POST"])
@permission_classes([AllowAny])
def character_install_disk(request, pk):
    return _sheet_action(
        request, pk, AbilityDiskSerializer,
        lambda c, reg, d: install_ability_disk(c, d["ability"]),
    )


@api_view(["POST"])
@permission_classes([AllowAny])
def character_evolve(request, pk):
    return _sheet_action(
        request, pk, EvolveSerializer,
        lambda c, reg, d: evolve_ability(c, reg, d["ability_id"]),
    )


@api_view(["POST"])
@permission_classes([AllowAny])
def character_class(request, pk):
    return _sheet_action(
        request, pk, ClassSelectSerializer,
        lambda c, reg, d: select_class(c, reg, d["class_name"]),
    )


@api_view(["POST"])
@permission_classes([AllowAny])
def character_level(request, pk):
    return _sheet_action(
        request, pk, LevelAdjustSerializer,
        lambda c, reg, d: adjust_level(c, d["delta"]),
    )


@api_view(["GET"])
@permission_classes([AllowAny])
def character_disk_candidates(request, pk):
    record = get_object_or_404(_characters(request), pk=pk)
    registry = get_registry(False)
    found = unlearned_abilities(registry, record.to_engine(), request.query_params.get("search", ""))
    return Response([ability_to_dict(a) for a in found])


# =========================
# BATTLE LOG
# =========================

@api_view(["GET", "POST"])
@permission_classes([AllowAny])
def battle_log(request, pk):
    record = get_object_or_404(_characters(request), pk=pk)

    if request.method == "GET":
        return Response({"ok": True, "pending": [e.to_dict() for e in pending_entries(record)]})

    serializer = BattleCalculateSerializer(data=request.data)
    if not serializer.is_valid():
        return _invalid(serializer)
    data = serializer.validated_data

    registry = get_registry()
    try:
        if data["mode"] == MODE_COMBAT:
            entry = calculate_combat(
                record.to_engine(),
                registry,
                serializer.monster_selections(),
                party_size=data["party_size"],
                loot=serializer.loot_selections(),
                chapter_ref=data["chapter_ref"],
            )
        else:
            entry = calculate_custom_reward(
                registry,
                data["xp"],
                data["credits"],
                party_size=data["party_size"],
                description=data["description"],
                loot=serializer.loot_selections(),
                chapter_ref=data["chapter_ref"],
            )
    except RuleError as e:
        return _rule_error(e)

    if entry is None:
        return Response({"ok": False, "error": "No known monsters selected.", "code": "NOTHING_TO_LOG"}, status=400)

    try:
        queued = queue_pending_entry(_characters(request), pk, entry, limit=get_setting("BATTLE_LOG_LIMIT"))
    except RuleError as e:
        return _rule_error(e)

    pending = pending_entries(record)
    return Response({"ok": True, "entry": queued.to_dict(), "pending": [e.to_dict() for e in pending]}, status=201)


@api_view(["POST"])
@permission_classes([AllowAny])
def battle_apply(request, pk, entry_id):
    get_object_or_404(_characters(request), pk=pk)

    try:
        record, remaining, level_up = apply_pending_entry(_characters(request), pk, entry_id)
    except RuleError as e:
        return _rule_error(e)

    return Response({
        "ok": True,
        "character": _sheet(record, get_registry(False)),
        "level_up": level_up_to_dict(level_up),
        "history_line": record.history[0] if record.history else "",
        "pending": [e.to_dict() for e in remaining],
    })


@api_view(["DELETE"])
@permission_classes([AllowAny])
def battle_discard(request, pk, entry_id):
    get_object_or_404(_characters(request), pk=pk)
    remaining = discard_pending_entry(_characters(request), pk, entry_id)
    return Response({"ok": True, "pending": [e.to_dict() for e in remaining]})


# =========================
# SAVE FILES
# =========================

@api_view(["GET"])
@permission_classes([AllowAny])
def character_export(request, pk):
    record = get_object_or_404(_characters(request), pk=pk)
    character = record.to_engine()

    doc = export_save(
        character,
        quests=record.quests or [],
        monsters=[m.to_engine() for m in MonsterEntry.objects.all()],
        version=get_setting("SAVE_VERSION"),
    )
    response = Response(doc)
    response["Content-Disposition"] = f'attachment; filename="{save_filename(character)}"'
    return response


@api_view(["POST"])
@permission_classes([AllowAny])
def character_import(request, pk):
    """
    Replace the stored sheet with an uploaded save. The body is either the
    save document itself or {"save": "<json text>"}. A bad document is
    rejected before anything is written.
    """
    record = get_object_or_404(_characters(request), pk=pk)

    raw = request.data
    if isinstance(raw, dict) and isinstance(raw.get("save"), str):
        raw = raw["save"]
    elif not isinstance(raw, (dict, str)):
        raw = json.dumps(raw)

    registry = get_registry(False)
    try:
        save = load_save(raw, known_classes=registry.classes)
    except RuleError as e:
        logger.warning("rejected save import for #%s: %s", record.pk, e.details)
        return _rule_error(e)

    with transaction.atomic():
        record = _characters(request).select_for_update().get(pk=pk)
        record.load_from(save.character)
        record.quests = list(save.quests)
        record.save()

        for monster in save.monsters or ():
            entry = MonsterEntry.from_engine(monster)
            MonsterEntry.objects.update_or_create(
                code=entry.code,
                defaults={
                    "name": entry.name,
                    "description": entry.description,
                    "level": entry.level,
                    "rank": entry.rank,
                    "xp_reward": entry.xp_reward,
                    "credits": entry.credits,
                    "stats": entry.stats,
                    "abilities": entry.abilities,
                },
            )

        # a different sheet makes the old queue meaningless
        record.pending_rewards.all().delete()

    logger.info("imported save v%s into %s (#%s)", save.version, record.name, record.pk)

    return Response({"ok": True, "character": _sheet(record, registry)})


@api_view(["GET"])
@permission_classes([AllowAny])
def character_status_sheet(request, pk):
    record = get_object_or_404(_characters(request), pk=pk)
    character = record.to_engine()

    text = render_status_sheet(character, get_registry(False))
    response = HttpResponse(text, content_type="text/markdown; charset=utf-8")
    response["Content-Disposition"] = f'attachment; filename="{status_filename(character)}"'
    return response


# =========================
# CATALOGS
# =========================

@api_view(["GET"])
@permission_classes([AllowAny])
def monster_list(request):
    registry = get_registry()
    return Response([monster_to_dict(m) for m in registry.monsters.values()])


@api_view(["GET"])
@permission_classes([AllowAny])
def class_list(request):
    registry = get_registry(False)
    return Response([class_to_dict(c) for c in registry.classes.values()])


@api_view(["GET"])
@permission_classes([AllowAny])
def ability_list(request):
    registry = get_registry(False)
    return Response([ability_to_dict(a) for a in registry.abilities.values()])


@api_view(["GET"])
@permission_classes([AllowAny])
def loot_list(request):
    return Response(list(get_registry(False).loot))
