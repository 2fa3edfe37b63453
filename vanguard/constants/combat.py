"""Constants for skills, ranges, and the combat stand-ins used by agents."""


class CombatConstants:
    """Constants for skills, ranges, and the combat stand-ins used by agents."""

    # --- Skill identifiers ---
    HEAL_SELF = "HealSelf"
    ARMOR_BREAK = "ArmorBreak"
    HEAVY_BLOW = "HeavyBlow"

    # --- Debuffs ---
    ARMOR_BROKEN = "ArmorBroken"
    ARMOR_BREAK_DURATION_TURNS = 3

    # --- Ranges (path distance in tiles) ---
    MELEE_RANGE = 1
    ARMOR_BREAK_RANGE = 3
    HEAVY_BLOW_RANGE = 2

    # --- Mana costs ---
    HEAL_SELF_MANA = 15
    ARMOR_BREAK_MANA = 20
    HEAVY_BLOW_MANA = 25

    # --- Cooldowns (turns until the skill is ready again) ---
    HEAL_SELF_COOLDOWN = 2
    ARMOR_BREAK_COOLDOWN = 3
    HEAVY_BLOW_COOLDOWN = 2

    # --- Damage / healing ranges (inclusive) ---
    # These are stand-ins so the decision loop can be exercised end-to-end.
    # Authoritative damage math lives with the game server.
    ATTACK_DAMAGE = (10, 29)
    ARMOR_BREAK_DAMAGE = (8, 22)
    HEAVY_BLOW_DAMAGE = (15, 39)
    HEAL_AMOUNT = (15, 34)

    # Heavy blow damage multiplier against an armor-broken target.
    HEAVY_BLOW_ARMOR_BROKEN_MULT = 1.5
