"""Tunable knobs for the planner.

Values are read at call time (``Params.X``), so overrides applied through
``Params.apply_overrides`` take effect for the rest of the process.
"""
from __future__ import annotations

from typing import Any, Dict, List

from unleash_agent.model import MAX_TICKS


class Params:
    # --- Valuation ---
    DISCOUNT_RATE = 0.9
    EXPLOSION_COST = 100
    ORE_PAYOFF_POWER = 8  # sharpens high-confidence ore cells

    # --- Ore priors ---
    ORE_START_X = 4
    ORE_BEFORE_START_X_PRIOR_BELIEF = -1.0
    ORE_MARGIN = 1
    ORE_MARGIN_PRIOR_BELIEF = -1.0

    # --- Belief updates ---
    ORE_NEIGHBOUR_RANGE = 2
    ORE_NEIGHBOUR_BELIEF = 0.5
    ENEMY_ORE_NEIGHBOUR_BELIEF = 0.25
    ENEMY_DIG_TRAP_BELIEF = 1.0
    STILL_ENEMY_TRAP_BELIEF = 0.5
    STILL_ENEMY_MIN_CARRYING = 0.25
    POTENTIAL_DIG_CARRYING_DECAY = 0.1

    # --- Requests ---
    MINIMUM_VISIBLE_ORE_PER_ROBOT = 1
    MAXIMUM_VISIBLE_ORE = 100
    MAXIMUM_TRAPS = 0
    MAXIMUM_RADAR_COVERAGE = 0.9
    RADAR_PLACEMENT_WEIGHT = 10.0
    TRAP_PLACEMENT_WEIGHT = 1.0
    TRAP_PLACEMENT_RANGE = 5

    # --- Digging and returning ---
    DIG_CANDIDATES = 10
    FUTURE_DIG_WEIGHT = 0.5
    RETURN_STRAIGHT_WEIGHT = 0.0
    RETURN_NEXT_ORE_WEIGHT = 1.0

    # --- Bluffing ---
    BLUFF_ENABLED = True
    BLUFF_INTERVAL = 5
    BLUFF_WEIGHT = 0.05

    # --- Squirrelling ---
    SQUIRREL_ENABLED = True
    MIN_SQUIRREL_X = 5
    MAX_SQUIRREL_ORE = 2
    SQUIRREL_WEIGHT = 1.0
    UNSQUIRREL_TICK = MAX_TICKS - 40

    # --- Hazards and coordination ---
    BAIT_ENABLED = True
    ALLOW_EXPLOSION_TRADES = True
    COORDINATION_ROUNDS = 50

    @classmethod
    def names(cls) -> List[str]:
        return [k for k in vars(cls) if k.isupper()]

    @classmethod
    def snapshot(cls) -> Dict[str, Any]:
        return {k: getattr(cls, k) for k in cls.names()}

    @classmethod
    def apply_overrides(cls, cfg: Dict[str, Any]) -> List[str]:
        """Set existing UPPERCASE attributes from `cfg`; return the keys applied."""
        applied: List[str] = []
        for key, value in cfg.items():
            if not isinstance(key, str):
                continue
            if not key.isupper():
                continue
            if not hasattr(cls, key):
                continue
            setattr(cls, key, value)
            applied.append(key)
        cls.validate()
        return applied

    @classmethod
    def validate(cls) -> None:
        if not 0.0 < cls.DISCOUNT_RATE <= 1.0:
            raise ValueError("DISCOUNT_RATE must be in (0, 1]")
        if cls.EXPLOSION_COST < 0:
            raise ValueError("EXPLOSION_COST must be >= 0")
        if cls.ORE_PAYOFF_POWER <= 0:
            raise ValueError("ORE_PAYOFF_POWER must be positive")
        if cls.ORE_START_X < 1 or cls.ORE_MARGIN < 1:
            raise ValueError("ORE_START_X and ORE_MARGIN must be >= 1")
        if cls.ORE_NEIGHBOUR_RANGE < 0:
            raise ValueError("ORE_NEIGHBOUR_RANGE must be >= 0")
        if cls.DIG_CANDIDATES < 1:
            raise ValueError("DIG_CANDIDATES must be >= 1")
        if cls.BLUFF_INTERVAL < 1:
            raise ValueError("BLUFF_INTERVAL must be >= 1")
        if cls.COORDINATION_ROUNDS < 1:
            raise ValueError("COORDINATION_ROUNDS must be >= 1")
        if not 0.0 <= cls.MAXIMUM_RADAR_COVERAGE <= 1.0:
            raise ValueError("MAXIMUM_RADAR_COVERAGE must be in [0.0, 1.0]")
        for key in (
            "RADAR_PLACEMENT_WEIGHT",
            "TRAP_PLACEMENT_WEIGHT",
            "FUTURE_DIG_WEIGHT",
            "RETURN_STRAIGHT_WEIGHT",
            "RETURN_NEXT_ORE_WEIGHT",
            "BLUFF_WEIGHT",
            "SQUIRREL_WEIGHT",
            "STILL_ENEMY_TRAP_BELIEF",
            "ENEMY_DIG_TRAP_BELIEF",
        ):
            if getattr(cls, key) < 0:
                raise ValueError(f"{key} must be >= 0")


def discount(payoff: float, ticks: float) -> float:
    return payoff * Params.DISCOUNT_RATE ** ticks
