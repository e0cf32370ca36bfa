from django.contrib import admin

from .models import CharacterRecord, MonsterEntry, PendingReward


# -----------------------------
# Character Admin
# -----------------------------

@admin.register(CharacterRecord)
class CharacterRecordAdmin(admin.ModelAdmin):
    list_display = ("name", "owner", "class_name", "level", "xp", "credits", "updated_at")
    list_filter = ("class_name",)
    search_fields = ("name", "owner__username")
    autocomplete_fields = ("owner",)
    readonly_fields = ("updated_at",)


# -----------------------------
# Bestiary Admin
# -----------------------------

@admin.register(MonsterEntry)
class MonsterEntryAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "level", "rank", "xp_reward", "credits")
    list_filter = ("rank",)
    search_fields = ("name", "code")


# -----------------------------
# Pending Rewards Admin
# -----------------------------

@admin.register(PendingReward)
class PendingRewardAdmin(admin.ModelAdmin):
    list_display = ("character", "description", "xp", "credits", "entry_id")
    search_fields = ("character__name", "description")
    autocomplete_fields = ("character",)
