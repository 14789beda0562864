from opponent.accuracy import (
    accuracy_radius,
    clamp_multiplier,
    difficulty_description,
    expected_average,
    expected_mpr,
    sample_point_in_disc,
)
from opponent.cricket_strategy import analyze_cricket_state, choose_cricket_target
from opponent.simulator import ai_player_info, choose_target, simulate_throw, visualization_data
from opponent.x01_strategy import choose_x01_target

__all__ = [
    "accuracy_radius",
    "ai_player_info",
    "analyze_cricket_state",
    "choose_cricket_target",
    "choose_target",
    "choose_x01_target",
    "clamp_multiplier",
    "difficulty_description",
    "expected_average",
    "expected_mpr",
    "sample_point_in_disc",
    "simulate_throw",
    "visualization_data",
]
