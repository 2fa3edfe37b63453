"""
Configuration constants.

Centralizes the tunable numbers used by the decision engine.
Organized by functional area for easy maintenance.
"""

import sys

# =============================================================================
# GENERAL
# =============================================================================

# Test environment detection
IS_TEST_ENVIRONMENT = "pytest" in sys.modules

# =============================================================================
# UTILITY SCORING
# =============================================================================

# Floor applied to every aggregated utility. Keeps a well-defined "least bad"
# choice even when every candidate scores poorly.
MIN_SCORE = 0.0001

# =============================================================================
# DECISION CONTROLLER
# =============================================================================

# Emergency retreat override. Both conditions must hold: retreat utility above
# FLEE_UTILITY_THRESHOLD and health ratio below FLEE_HEALTH_RATIO_THRESHOLD.
FLEE_UTILITY_THRESHOLD = 0.75
FLEE_HEALTH_RATIO_THRESHOLD = 0.35

# Attack-class utility is multiplied by (1 + W * objective.priority) while a
# team objective is active.
GLOBAL_OBJECTIVE_WEIGHT = 0.3

# Print the full per-candidate score table at DEBUG level after each decision.
LOG_SCORE_BREAKDOWN = False

# =============================================================================
# IDLE FALLBACK
# =============================================================================

IDLE_BASE_SCORE = 0.01
# Waiting is slightly more attractive while mana regenerates.
IDLE_LOW_MANA_SCORE = 0.05
IDLE_LOW_MANA_THRESHOLD = 10
IDLE_HEALTHY_THRESHOLD = 50

# =============================================================================
# AGENTS
# =============================================================================

DEFAULT_MAX_HEALTH = 100
DEFAULT_MAX_MANA = 100
DEFAULT_MOVEMENT_RANGE = 3

# =============================================================================
# TEAM COORDINATION
# =============================================================================

# Enemies within this path distance of the team's objective point are
# preferred as focus targets.
FOCUS_OBJECTIVE_RADIUS = 7
