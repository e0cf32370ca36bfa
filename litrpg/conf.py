from django.conf import settings

DEFAULTS = {
    "MAX_PARTY_SIZE": 20,
    "SAVE_VERSION": "1.0",
    "BATTLE_LOG_LIMIT": 50,
}


def get_setting(name: str):
    """settings.LITRPG[name], falling back to the defaults above."""
    return getattr(settings, "LITRPG", {}).get(name, DEFAULTS[name])
