"""Combined Estimative Index analysis for an aquarium.

:func:`analyze_tank` wires the individual engine components together the
way the analysis panel consumes them: aggregate the last week of dosing,
scale the EI bands by the tank's consumption multiplier, classify each
element, suggest doses for the low ones and project the coming week.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping

from .consumption import classify_demand, consumption_multiplier, describe_consumption
from .models import (
    AggregationResult,
    DemandLevel,
    DosingEvent,
    DosingRecommendation,
    FertilizerComposition,
    NutrientStatus,
    NutrientTotals,
    ProjectionPoint,
    TankSetup,
    TargetRange,
    WaterSourceProfile,
)
from .nutrient_aggregator import DEFAULT_WINDOW_DAYS, aggregate_with_report
from .nutrient_status import classify, progress_values, summarize_status
from .projection import daily_rates_from_weekly, project
from .recommendations import generate_tips, recommend
from .targets import scaled_targets

__all__ = ["EIAnalysis", "analyze_tank"]


@dataclass(slots=True, frozen=True)
class EIAnalysis:
    """Everything the analysis panel shows for one tank."""

    setup: TankSetup
    weekly_totals: NutrientTotals
    consumption_multiplier: float
    demand: DemandLevel
    consumption_description: str
    targets: Dict[str, TargetRange]
    status: Dict[str, NutrientStatus]
    progress: Dict[str, float]
    recommendations: List[DosingRecommendation]
    tips: List[str]
    aggregation: AggregationResult
    projection: List[ProjectionPoint] = field(default_factory=list)

    @property
    def all_optimal(self) -> bool:
        return summarize_status(self.status)["all_optimal"]

    def as_dict(self) -> Dict[str, Any]:
        return {
            "setup": self.setup.as_dict(),
            "weekly_totals": self.weekly_totals.as_dict(),
            "consumption_multiplier": self.consumption_multiplier,
            "demand": self.demand.value,
            "consumption_description": self.consumption_description,
            "targets": {n: r.as_dict() for n, r in self.targets.items()},
            "status": {n: s.value for n, s in self.status.items()},
            "progress": dict(self.progress),
            "recommendations": [r.as_dict() for r in self.recommendations],
            "tips": list(self.tips),
            "skipped_events": self.aggregation.skipped_events,
            "projection": [p.as_dict() for p in self.projection],
        }


def analyze_tank(
    setup: TankSetup,
    events: Iterable[DosingEvent],
    compositions: Mapping[str, FertilizerComposition],
    *,
    window_days: int = DEFAULT_WINDOW_DAYS,
    ei_fraction: float = 1.0,
    today: date | None = None,
    per_liter: bool = True,
    horizon_days: int = 7,
    water_change_fraction: float = 0.5,
    water_change_day: int | None = 7,
    source: WaterSourceProfile | None = None,
) -> EIAnalysis:
    """Return the EI analysis of ``setup`` for the trailing dosing window.

    With ``per_liter`` (the default) compositions are ppm per unit per liter
    and totals are divided by the tank volume, matching the volume based
    dose formula used for recommendations. The projection starts from the
    weekly totals and doses them evenly over the coming days.
    """

    report = aggregate_with_report(
        events,
        compositions,
        window_days,
        today=today,
        volume_liters=setup.volume_liters if per_liter else None,
    )
    totals = report.totals
    multiplier = consumption_multiplier(setup)
    targets = scaled_targets(multiplier, ei_fraction)
    status = classify(totals, targets)

    projection = project(
        totals,
        daily_rates_from_weekly(totals),
        setup,
        horizon_days,
        water_change_fraction,
        water_change_day,
        source,
        start_date=today or date.today(),
    )

    return EIAnalysis(
        setup=setup,
        weekly_totals=totals,
        consumption_multiplier=multiplier,
        demand=classify_demand(multiplier),
        consumption_description=describe_consumption(multiplier),
        targets=targets,
        status=status,
        progress=progress_values(totals, targets),
        recommendations=recommend(status, targets, totals, compositions, setup.volume_liters),
        tips=generate_tips(setup, status, totals, multiplier),
        aggregation=report,
        projection=projection,
    )
