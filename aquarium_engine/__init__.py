"""Convenient access to the aquarium dosing engine."""

from __future__ import annotations

from . import (
    consumption,
    dose_calculator,
    ei_analysis,
    models,
    nutrient_aggregator,
    nutrient_status,
    projection,
    recommendations,
    remineralization,
    targets,
    utils,
    water_contribution,
    water_mix,
)
from .consumption import classify_demand, consumption_multiplier, describe_consumption
from .dose_calculator import calculate_full_dose, nutrient_addition, ppm_per_unit_from_label
from .ei_analysis import EIAnalysis, analyze_tank
from .models import *  # noqa: F401,F403
from .nutrient_aggregator import aggregate, aggregate_with_report, weekly_amounts
from .nutrient_status import classify, progress_value
from .projection import daily_rates_from_weekly, project, projection_frame
from .recommendations import generate_tips, recommend
from .remineralization import Additive, get_remineralizer, list_remineralizers, solve_remineralization
from .targets import base_targets, get_target_range, scaled_targets
from .water_contribution import contribution
from .water_mix import mix_volumes, solve_mix

__all__ = sorted(
    set(models.__all__)
    | {
        "classify_demand",
        "consumption_multiplier",
        "describe_consumption",
        "calculate_full_dose",
        "nutrient_addition",
        "ppm_per_unit_from_label",
        "EIAnalysis",
        "analyze_tank",
        "aggregate",
        "aggregate_with_report",
        "weekly_amounts",
        "classify",
        "progress_value",
        "daily_rates_from_weekly",
        "project",
        "projection_frame",
        "generate_tips",
        "recommend",
        "Additive",
        "get_remineralizer",
        "list_remineralizers",
        "solve_remineralization",
        "base_targets",
        "get_target_range",
        "scaled_targets",
        "contribution",
        "mix_volumes",
        "solve_mix",
    }
)
