from django.urls import path
from . import views

urlpatterns = [
    path("api/characters/", views.character_list, name="character-list"),
    path("api/characters/<int:pk>/", views.character_detail, name="character-detail"),

    # sheet actions
    path("api/characters/<int:pk>/attributes/", views.character_attributes, name="character-attributes"),
    path("api/characters/<int:pk>/abilities/", views.character_abilities, name="character-abilities"),
    path("api/characters/<int:pk>/abilities/disk/", views.character_install_disk, name="character-install-disk"),
    path("api/characters/<int:pk>/abilities/disk/candidates/", views.character_disk_candidates, name="character-disk-candidates"),
    path("api/characters/<int:pk>/abilities/evolve/", views.character_evolve, name="character-evolve"),
    path("api/characters/<int:pk>/class/", views.character_class, name="character-class"),
    path("api/characters/<int:pk>/level/", views.character_level, name="character-level"),

    # battle calculator + pending rewards
    path("api/characters/<int:pk>/battle/", views.battle_log, name="battle-log"),
    path("api/characters/<int:pk>/battle/<int:entry_id>/apply/", views.battle_apply, name="battle-apply"),
    path("api/characters/<int:pk>/battle/<int:entry_id>/", views.battle_discard, name="battle-discard"),

    # files
    path("api/characters/<int:pk>/export/", views.character_export, name="character-export"),
    path("api/characters/<int:pk>/import/", views.character_import, name="character-import"),
    path("api/characters/<int:pk>/status-sheet/", views.character_status_sheet, name="character-status-sheet"),

    path("api/monsters/", views.monster_list, name="monster-list"),
    path("api/classes/", views.class_list, name="class-list"),
    path("api/abilities/", views.ability_list, name="ability-list"),
    path("api/loot/", views.loot_list, name="loot-list"),
]
