"""
Unit handling for calculation suggestions.

Two independent mechanisms live here:
- a per-unit sweep converting an evaluated, unit-suffixed result into the
  other units of the same category via fixed linear factors
- keyword-triggered conversion recommendations for conversational queries
  (a lookup table, not a unit-algebra solver)
"""
import math
import re
from dataclasses import dataclass
from typing import List, Optional

from core.constants import (
    MAX_UNIT_CONVERSIONS,
    SUGGESTION_CONFIDENCE,
    UNIT_CONVERSIONS,
    UNIT_PATTERNS,
)
from core.models import Suggestion, SuggestionType
from .evaluator import SafeEvaluator


@dataclass
class ExtractedQueryData:
    """Numbers and unit spellings found in a query."""
    values: List[float]
    units: List[str]


def find_unit_category(unit: str) -> Optional[str]:
    """
    Find the conversion category of a unit.

    Args:
        unit: Lower-cased unit, e.g. ``"cm"``

    Returns:
        Category name (length, area, volume, mass) or None
    """
    for category, units in UNIT_CONVERSIONS.items():
        if unit in units:
            return category
    return None


def convert_value(value: float, from_unit: str, to_unit: str) -> float:
    """
    Convert between two units of the same category.

    Raises:
        ValueError: Unknown units or mismatched categories
    """
    category = find_unit_category(from_unit)
    if category is None or to_unit not in UNIT_CONVERSIONS[category]:
        raise ValueError(f"Cannot convert {from_unit} to {to_unit}")

    factors = UNIT_CONVERSIONS[category]
    return value * factors[from_unit] / factors[to_unit]


def extract_units_and_values(query_text: str) -> ExtractedQueryData:
    """
    Pull numbers and known unit spellings out of a query.

    Args:
        query_text: Lower-cased query

    Returns:
        ExtractedQueryData
    """
    values = [float(number) for number in re.findall(r'\b\d+\.?\d*\b', query_text)]

    units: List[str] = []
    for unit_group in UNIT_PATTERNS.values():
        for unit in unit_group:
            if unit.lower() in query_text:
                units.append(unit)

    return ExtractedQueryData(values=values, units=units)


class UnitConverter:
    """Generate unit-conversion suggestions."""

    def __init__(self, evaluator: Optional[SafeEvaluator] = None):
        self.evaluator = evaluator or SafeEvaluator()

    def suggest_unit_conversions(self, expression: str) -> List[Suggestion]:
        """
        Convert an evaluated, unit-suffixed expression into sibling units.

        Args:
            expression: Text such as ``"5 m"`` or ``"2 + 3 kg"``

        Returns:
            At most three conversions, each at fixed confidence
        """
        calculation = self.evaluator.evaluate(expression)
        if not calculation.ok or not calculation.unit:
            return []

        unit = calculation.unit
        category = find_unit_category(unit)
        if category is None:
            return []

        suggestions: List[Suggestion] = []
        for target_unit in UNIT_CONVERSIONS[category]:
            if target_unit == unit:
                continue

            converted = convert_value(calculation.result, unit, target_unit)
            suggestions.append(Suggestion(
                type=SuggestionType.UNIT_CONVERSION,
                title=f"Convert to {target_unit}",
                description=f"{calculation.result} {unit} = {converted:.4f} {target_unit}",
                expression=f"{converted}",
                result=converted,
                confidence=SUGGESTION_CONFIDENCE['unit_sweep'],
                reasoning=f"Standard unit conversion from {unit} to {target_unit}",
                category='engineering',
            ))

        return suggestions[:MAX_UNIT_CONVERSIONS]

    def suggest_keyword_conversions(self, query_text: str) -> List[Suggestion]:
        """
        Recommend canned conversions triggered by keyword co-occurrence.

        Args:
            query_text: Lower-cased conversational query

        Returns:
            Zero, one or two conversion recommendations
        """
        suggestions: List[Suggestion] = []

        if 'rpm' in query_text and ('fpm' in query_text or 'feet' in query_text):
            suggestions.append(Suggestion(
                type=SuggestionType.UNIT_CONVERSION,
                title='RPM to FPM Conversion',
                description='Convert rotational speed (RPM) to linear speed (FPM)',
                expression='FPM = π × Diameter(ft) × RPM',
                result=None,
                confidence=SUGGESTION_CONFIDENCE['rpm_to_fpm'],
                reasoning='Common conversion in mechanical engineering for belt drives and conveyors',
                category='mechanical',
                calculation='FPM = π × Diameter(ft) × RPM',
                examples=(
                    'Example: 1800 RPM motor with 6-inch pulley (0.5 ft diameter)',
                    f"FPM = π × 0.5 × 1800 = {rpm_to_fpm(1800, 6):.0f} ft/min",
                ),
            ))

        if 'rpm' in query_text and ('speed' in query_text or 'velocity' in query_text):
            suggestions.append(Suggestion(
                type=SuggestionType.UNIT_CONVERSION,
                title='RPM to Linear Speed',
                description='Convert rotational speed to linear velocity',
                expression='v = (π × D × RPM) / 60',
                result=None,
                confidence=SUGGESTION_CONFIDENCE['rpm_to_linear'],
                reasoning='Standard conversion for rotating machinery to linear motion',
                category='mechanical',
                calculation='v = (π × D × RPM) / 60',
                examples=(
                    'Example: 1500 RPM with 0.2m diameter wheel',
                    f"v = (π × 0.2 × 1500) / 60 = {rpm_to_linear_speed(1500, 0.2):.1f} m/s",
                ),
            ))

        return suggestions


# Quick helpers for common shop-floor conversions

def rpm_to_linear_speed(rpm: float, diameter: float, unit: str = 'metric') -> float:
    """Linear speed in m/s (metric, diameter in m) or ft/min (imperial, diameter in ft)."""
    if unit == 'metric':
        return (math.pi * diameter * rpm) / 60
    return math.pi * diameter * rpm


def rpm_to_fpm(rpm: float, diameter_inches: float) -> float:
    """Surface speed in ft/min for a pulley diameter given in inches."""
    return math.pi * (diameter_inches / 12) * rpm


def belt_ratio(drive_diameter: float, driven_diameter: float) -> float:
    """Speed ratio between driving and driven pulleys."""
    if drive_diameter == 0:
        raise ValueError("Drive pulley diameter must be non-zero")
    return driven_diameter / drive_diameter


def motor_power(torque_lb_ft: float, rpm: float) -> float:
    """Horsepower from torque in lb-ft and speed in RPM."""
    return (torque_lb_ft * rpm) / 5252
