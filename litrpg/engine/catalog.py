"""
Static game data: classes, their abilities, the starter bestiary and loot.

Nothing here registers itself anywhere. kits.build_registry() turns these
definitions into the lookup tables the rest of the engine uses.
"""
from __future__ import annotations

from .abilities import Ability, AbilityTier, CharacterClass, EvolvesTo, generate_linear_tiers as lin
from .contracts import Attribute as A, Monster
from .progression import round_half_up, xp_for_level_step

# =========================
# MONSTER REWARD RULES
# =========================

CREDIT_MULTIPLIER = 2.5

MONSTER_RANK_MULTIPLIERS = {
    "Trash": 0.01,
    "Regular": 0.03,
    "Champion": 0.08,
    "Boss": 0.15,
}


def calculate_monster_xp(level: int, rank: str) -> int:
    """A fraction (by rank) of what the previous level step costs."""
    if level < 2:
        return 0
    return round_half_up(xp_for_level_step(level - 1) * MONSTER_RANK_MULTIPLIERS[rank])


def calculate_monster_credits(xp: int) -> int:
    return round_half_up(xp * CREDIT_MULTIPLIER)


# =========================
# ABILITIES WITH HAND-WRITTEN TIERS
# =========================

GHOST_PROTOCOL = Ability(
    id="ghost_protocol",
    name="Ghost Protocol",
    description="Complete visual and thermal invisibility. Attacks do not break stealth for the first 3 seconds.",
    max_level=5,
    tiers=(
        AbilityTier(1, "Attacks do not break stealth.", duration="20s", cooldown="10m"),
        AbilityTier(2, "Attacks do not break stealth.", duration="30s", cooldown="10m"),
        AbilityTier(3, "Attacks do not break stealth.", duration="40s", cooldown="10m"),
        AbilityTier(4, "Attacks do not break stealth.", duration="50s", cooldown="10m"),
        AbilityTier(5, "Permanent Stealth until attack.", duration="Toggle", cooldown="5m"),
    ),
)

LIGHT_ARMOR_FAMILIARITY = Ability(
    id="light_armor_familiarity",
    name="Light Armor Familiarity",
    description="Allows the user to activate Active Camouflage when wearing the Scout Suit.",
    max_level=10,
    evolution=EvolvesTo("ghost_protocol"),
    tiers=(
        AbilityTier(1, "Active Camouflage enabled.", duration="10s", cooldown="10m"),
        AbilityTier(2, "Camouflage stabilization.", duration="15s", cooldown="10m"),
        AbilityTier(3, "Movement blur reduction.", duration="20s", cooldown="10m"),
        AbilityTier(4, "Thermal masking.", duration="25s", cooldown="10m"),
        AbilityTier(5, "Sound dampening.", duration="30s", cooldown="10m"),
        AbilityTier(6, "Advanced distortion.", duration="35s", cooldown="15m"),
        AbilityTier(7, "Running does not break shimmer.", duration="40s", cooldown="15m"),
        AbilityTier(8, "Silhouette erasure.", duration="45s", cooldown="15m"),
        AbilityTier(9, "Light bending mastery.", duration="50s", cooldown="15m"),
        AbilityTier(10, "Maximized Active Camouflage.", duration="55s", cooldown="15m"),
    ),
)


def _ab(id_, name, desc, base, step, unit, kind, max_level=10):
    return Ability(id=id_, name=name, description=desc, max_level=max_level,
                   tiers=lin(max_level, base, step, unit, kind))


# =========================
# CLASSES
# =========================

def default_classes() -> tuple[CharacterClass, ...]:
    recruit = CharacterClass(
        name="Recruit",
        description="The starting point for all adventurers. Balanced potential.",
        starting_item="Standard Issue Kinetic Pistol",
        primary_attribute=A.STR,
        secondary_attribute=A.DEX,
        abilities=(
            _ab("ranged_weapons", "Ranged Weapons Familiarity", "Basic competence with firearms.", 5, 5, "%", "Damage", max_level=5),
        ),
        upgrades=("Ranger", "Hunter", "Brawler", "Scout", "Defender",
                  "Technician", "Minuteman", "Marauder", "Field Medic"),
    )

    # --- TIER 2 ---
    tier2 = (
        CharacterClass("Ranger", "Masters of long-range engagement and survival.", "Energy Pulse Carbine", A.PER, A.DEX, (
            _ab("eagle_eye", "Eagle Eye", "Increases effective range.", 10, 10, "m", "Effect"),
            _ab("survivalist", "Survivalist", "Bonus to foraging.", 5, 5, "%", "Effect"),
            _ab("focus_fire", "Focus Fire", "Consecutive hits dmg.", 2, 2, "%", "Damage"),
            _ab("camouflage", "Camouflage", "Blend into nature.", 10, 5, "s", "Effect"),
            _ab("trap_setting", "Trap Setting", "Create energy snares.", 50, 50, "dmg", "Damage"),
        ), ()),
        CharacterClass("Hunter", "Patient stalkers who eliminate high-value targets.", "Energy Sniper Rifle", A.PER, A.DEX, (
            _ab("headshot", "Headshot", "Crit damage bonus.", 20, 10, "%", "Damage"),
            _ab("stalking", "Stalking", "Move silently.", 10, 5, "%", "Effect"),
            _ab("mark_target", "Mark Target", "Debuff evasion.", -5, -2, "%", "Effect"),
            _ab("patience", "Patience", "Wait dmg bonus.", 5, 5, "%", "Damage"),
            _ab("decoy", "Decoy", "Holo lure.", 10, 5, "s", "Effect"),
        ), ("Deadeye", "Blade Master")),
        CharacterClass("Brawler", "Close-quarters combatants relying on brute force.", "Energy Mace", A.STR, A.CHA, (
            _ab("power_strike", "Power Strike", "High damage melee.", 150, 10, "%", "Damage"),
            _ab("adrenaline", "Adrenaline Rush", "Temp HP.", 20, 10, "HP", "Heal"),
            _ab("grapple", "Grapple", "Immobilize.", 2, 1, "s", "Effect"),
            _ab("intimidate", "Intimidate", "Lower morale.", -5, -2, "ATK", "Effect"),
            _ab("thick_skin", "Thick Skin", "Physical resist.", 5, 2, "%", "Effect"),
        ), ("Crusher",)),
        CharacterClass("Scout", "Agile reconnaissance units.", "Energy Dagger", A.PER, A.DEX, (
            _ab("dash", "Dash", "Extra movement.", 2, 1, "m", "Effect"),
            _ab("radar_pulse", "Radar Pulse", "Detect enemies.", 20, 10, "m", "Effect"),
            _ab("backstab", "Backstab", "Rear damage.", 50, 10, "%", "Damage"),
            LIGHT_ARMOR_FAMILIARITY,
            _ab("light_step", "Light Step", "Trap avoidance.", 10, 5, "%", "Effect"),
        ), ("Assassin", "Operative")),
        CharacterClass("Defender", "Protectors who hold the line.", "Deployable Energy Shield", A.STR, A.MEM, (
            _ab("energy_wall", "Energy Wall", "Stationary cover.", 100, 50, "HP", "Effect"),
            _ab("taunt", "Taunt", "Force attack.", 3, 1, "s", "Effect"),
            _ab("armor_up", "Armor Up", "Mitigation.", 10, 2, "%", "Effect"),
            _ab("intervene", "Intervene", "Take damage.", 5, 5, "m", "Effect"),
            _ab("shield_bash", "Shield Bash", "Stun.", 1, 0.5, "s", "Effect"),
        ), ()),
        CharacterClass("Technician", "Masters of machines and automated warfare.", "Deployable Energy Turret", A.INT, A.MEM, (
            _ab("turret_mastery", "Turret Mastery", "Upgrade stats.", 10, 5, "%", "Effect"),
            _ab("repair", "Repair", "Heal mechs.", 20, 10, "HP", "Heal"),
            _ab("overclock", "Overclock", "Tech speed.", 10, 5, "%", "Effect"),
            _ab("hack", "Hack", "Control tech.", 5, 2, "s", "Effect"),
            _ab("drone_swarm", "Drone Swarm", "Mini-drones.", 1, 1, "drone", "Effect"),
        ), ("Combat Engineer", "Demolitions Expert")),
        CharacterClass("Minuteman", "Versatile soldiers ready for anything.", "Energy Musket", A.CHA, A.STR, (
            _ab("rally", "Rally", "Buff allies.", 5, 2, "%", "Effect"),
            _ab("bayonet_charge", "Bayonet Charge", "Gap closer.", 120, 10, "%", "Damage"),
            _ab("fortify", "Fortify", "Create cover.", 50, 20, "HP", "Effect"),
            _ab("suppressive_fire", "Suppressive Fire", "Lower accuracy.", -10, -2, "%", "Effect"),
            _ab("quick_reload", "Quick Reload", "Reduce AP cost.", 5, 5, "%", "Effect"),
        ), ()),
        CharacterClass("Marauder", "Chaos sowers who thrive in the thick of battle.", "Energy Waraxe", A.STR, A.DEX, (
            _ab("whirlwind", "Whirlwind", "AOE attack.", 80, 5, "%", "Damage"),
            _ab("bloodlust", "Bloodlust", "Heal on kill.", 10, 5, "HP", "Heal"),
            _ab("sunder", "Sunder", "Destroy armor.", 5, 2, "%", "Effect"),
            _ab("roar", "Roar", "Stun nearby.", 1, 0.2, "s", "Effect"),
            _ab("reckless_swing", "Reckless Swing", "High dmg/self dmg.", 200, 20, "%", "Damage"),
        ), ("Suppressor", "Juggernaut")),
        CharacterClass("Field Medic", "Support specialists who keep the team alive.", "Medical Scanner", A.INT, A.MEM, (
            _ab("heal_beam", "Heal Beam", "Restore HP.", 10, 5, "HP/s", "Heal"),
            _ab("revive", "Revive", "Bring back ally.", 10, 5, "% HP", "Heal"),
            _ab("stim_pack", "Stim Pack", "Buff Stats.", 5, 2, "%", "Effect"),
            _ab("cleanse", "Cleanse", "Remove effects.", 1, 1, "effect", "Effect"),
            _ab("anatomy_study", "Anatomy Study", "Weak points.", 5, 2, "%", "Effect"),
        ), ("Combat Medic", "Bio-Engineer")),
    )

    # --- TIER 3 ---
    tier3 = (
        CharacterClass("Assassin", "Lethal executioners specializing in single-target elimination.", "Mono-filament Wire", A.DEX, A.PER, (
            _ab("execute", "Execute", "Huge dmg on low HP.", 300, 50, "%", "Damage"),
            _ab("shadow_step", "Shadow Step", "Teleport behind target.", 10, 5, "m", "Effect"),
            _ab("poison_blade", "Poison Blade", "DoT damage.", 20, 10, "dmg/s", "Damage"),
        )),
        CharacterClass("Operative", "High-tech spies utilizing gadgets and subterfuge.", "Stealth Suit Mk IV", A.INT, A.DEX, (
            _ab("emp_blast", "EMP Blast", "Disable tech.", 10, 5, "m", "Effect"),
            _ab("sensor_jam", "Sensor Jam", "Blind enemies.", 5, 2, "s", "Effect"),
            _ab("hologram", "Hologram", "Create clone.", 30, 10, "s", "Effect"),
        )),
        CharacterClass("Deadeye", "Unmatched precision at extreme ranges.", "Anti-Materiel Rifle", A.PER, A.DEX, (
            _ab("one_shot", "One Shot", "Massive single hit.", 500, 100, "%", "Damage"),
            _ab("ballistics", "Ballistics Calc", "Ignore armor.", 10, 10, "%", "Effect"),
            _ab("zone_control", "Zone Control", "Auto-fire on move.", 1, 1, "shot", "Damage"),
        )),
        CharacterClass("Blade Master", "A whirlwind of steel and energy blades.", "Dual Energy Sabers", A.DEX, A.STR, (
            _ab("blade_dance", "Blade Dance", "Strike multiple foes.", 3, 1, "targets", "Damage"),
            _ab("deflect", "Deflect", "Block projectiles.", 20, 5, "%", "Effect"),
            _ab("precision_cut", "Precision Cut", "Sever limb chance.", 5, 2, "%", "Effect"),
        )),
        CharacterClass("Combat Medic", "Healers who can hold their own on the front lines.", "Biotic Rifle", A.INT, A.STR, (
            _ab("combat_stim", "Combat Stim", "Buff dmg & speed.", 10, 5, "%", "Effect"),
            _ab("triage", "Triage", "Instant heal low HP.", 200, 50, "HP", "Heal"),
            _ab("biogrenade", "Bio-Grenade", "Heal ally/Harm foe.", 50, 10, "HP", "Effect"),
        )),
        CharacterClass("Bio-Engineer", "Manipulators of biology to buff allies or mutate foes.", "Viral Injector", A.INT, A.MEM, (
            _ab("mutate", "Mutate", "Grant random buff.", 10, 5, "s", "Effect"),
            _ab("plague", "Plague", "Spreading DoT.", 10, 5, "dmg/s", "Damage"),
            _ab("regeneration", "Regeneration", "Passive healing.", 5, 2, "HP/s", "Heal"),
        )),
        CharacterClass("Suppressor", "Heavy weapons specialists who dominate sectors with firepower.", "Rotary Plasma Cannon", A.STR, A.PER, (
            _ab("barrage", "Barrage", "Cone of fire.", 50, 10, "dmg", "Damage"),
            _ab("lock_down", "Lock Down", "Immobile, +FireRate.", 20, 10, "%", "Effect"),
            _ab("suppression", "Suppression", "Slow enemies.", 30, 5, "%", "Effect"),
        )),
        CharacterClass("Juggernaut", "Unstoppable forces of nature encased in heavy armor.", "Powered Exo-Frame", A.STR, A.CHA, (
            _ab("unstoppable", "Unstoppable", "Immune to CC.", 5, 2, "s", "Effect"),
            _ab("impact", "Impact", "Charge dmg.", 100, 20, "dmg", "Damage"),
            _ab("iron_will", "Iron Will", "Survive fatal hit.", 1, 0, "HP", "Heal"),
        )),
        CharacterClass("Crusher", "Masters of blunt force trauma and crowd control.", "Gravity Hammer", A.STR, A.DEX, (
            _ab("quake", "Quake", "Knockdown area.", 5, 1, "m", "Effect"),
            _ab("shatter", "Shatter", "Bonus vs Armor.", 50, 10, "%", "Damage"),
            _ab("grab_throw", "Grab & Throw", "Toss enemy.", 5, 2, "m", "Effect"),
        )),
        CharacterClass("Combat Engineer", "Battlefield architects who build fortifications instantly.", "Matter Printer", A.INT, A.STR, (
            _ab("bunker", "Bunker", "Create cover.", 500, 100, "HP", "Effect"),
            _ab("auto_turret", "Auto-Turret", "Autonomous gun.", 20, 5, "dmg", "Damage"),
            _ab("minefield", "Minefield", "Area denial.", 100, 20, "dmg", "Damage"),
        )),
        CharacterClass("Demolitions Expert", "Experts in high-yield explosives and destruction.", "Grenade Launcher", A.INT, A.PER, (
            _ab("big_boom", "Big Boom", "Large AOE.", 200, 50, "dmg", "Damage"),
            _ab("shaped_charge", "Shaped Charge", "Breach walls.", 1, 0, "hole", "Effect"),
            _ab("cluster_bomb", "Cluster Bomb", "Multiple hits.", 5, 1, "bombs", "Effect"),
        )),
    )

    return (recruit,) + tier2 + tier3


def extra_abilities() -> tuple[Ability, ...]:
    """Abilities that no class teaches directly (evolution targets, disks)."""
    return (GHOST_PROTOCOL,)


# =========================
# BESTIARY & LOOT
# =========================

def default_monsters() -> tuple[Monster, ...]:
    return (
        Monster(
            id="m1",
            name="Skitterbug",
            level=2,
            rank="Trash",
            xp_reward=2,
            credits=5,
            description="Small six-legged creatures with a chitinous exterior.",
            stats={A.STR: 1, A.PER: 3, A.DEX: 4, A.MEM: 1, A.INT: 1, A.CHA: 1},
            abilities=("Quick Dash",),
        ),
        Monster(
            id="m2",
            name="Scrap Bot",
            level=3,
            rank="Regular",
            xp_reward=6,
            credits=15,
            description="A malfunctioning maintenance droid scavenging for parts.",
            stats={A.STR: 3, A.PER: 2, A.DEX: 1, A.MEM: 1, A.INT: 1, A.CHA: 1},
            abilities=("Crush", "Self-Destruct"),
        ),
    )


COMMON_LOOT = (
    "Scrap Metal", "Energy Cell", "Damaged Circuit", "Alien Chitin", "Biomass Sample",
    "Nutrient Paste", "Rusty Bolts", "Glass Shard", "Wire Spool", "Plastic Polymers",
)

UNCOMMON_LOOT = (
    "Intact Circuit Board", "Weapon Parts", "Medical Supplies", "Optical Lens", "Hydraulic Fluid",
    "Plasma Canister", "Refined Steel", "Crystal Shard", "Memory Module", "Servo Motor",
)

RARE_LOOT = (
    "Power Core", "Nano-fiber Mesh", "Encrypted Data Drive", "Void Essence",
    "Quantum Stabilizer", "High-Grade Alloy", "Targeting Logic Unit",
)


def default_loot() -> tuple[str, ...]:
    return tuple(sorted(COMMON_LOOT + UNCOMMON_LOOT + RARE_LOOT))
