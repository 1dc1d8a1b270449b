"""
Static catalog of engineering formulas.

The catalog is an immutable tuple defined at import time. ``FormulaCatalog``
builds its id and category indexes once and is read-only afterwards, so it
can be shared across tasks without synchronization.
"""
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Tuple

from core.models import EngineeringFormula, FormulaExample, UnitSystem, Variable


ENGINEERING_FORMULAS: Tuple[EngineeringFormula, ...] = (
    # Mechanical
    EngineeringFormula(
        id='motor-rpm-to-linear-speed',
        name='Motor RPM to Linear Speed',
        formula='v = (π * D * RPM) / 60',
        description='Convert motor RPM to linear speed using wheel/pulley diameter',
        category='mechanical',
        variables=(
            Variable('v', 'Linear Speed', 'Linear velocity', 'm/s'),
            Variable('D', 'Diameter', 'Wheel or pulley diameter', 'm'),
            Variable('RPM', 'Rotational Speed', 'Revolutions per minute', 'rpm'),
        ),
        units=(
            UnitSystem('metric', 'm/s', {'ft/min': 196.85, 'km/h': 3.6}),
            UnitSystem('imperial', 'ft/min', {'m/s': 0.00508, 'mph': 0.0114}),
        ),
        examples=(
            FormulaExample('Motor at 1800 RPM with 0.1m diameter wheel', {'RPM': 1800, 'D': 0.1}, 9.42, 'm/s'),
        ),
        tags=('motor', 'rpm', 'speed', 'mechanical', 'rotation'),
    ),
    EngineeringFormula(
        id='rpm-to-fpm',
        name='RPM to Feet Per Minute',
        formula='FPM = (π * D_ft * RPM)',
        description='Convert RPM to feet per minute using diameter in feet',
        category='mechanical',
        variables=(
            Variable('FPM', 'Feet Per Minute', 'Linear speed in ft/min', 'ft/min'),
            Variable('D_ft', 'Diameter (feet)', 'Diameter in feet', 'ft'),
            Variable('RPM', 'RPM', 'Revolutions per minute', 'rpm'),
        ),
        units=(
            UnitSystem('imperial', 'ft/min', {'m/s': 0.00508, 'mph': 0.0114}),
        ),
        examples=(
            FormulaExample('Motor at 1750 RPM with 6 inch (0.5 ft) pulley', {'RPM': 1750, 'D_ft': 0.5}, 2749, 'ft/min'),
        ),
        tags=('rpm', 'fpm', 'pulley', 'belt', 'conveyor'),
    ),
    EngineeringFormula(
        id='torque-power-rpm',
        name='Power from Torque and RPM',
        formula='P = (T * RPM) / 5252',
        description='Calculate horsepower from torque (lb-ft) and RPM',
        category='mechanical',
        variables=(
            Variable('P', 'Power', 'Power output', 'hp'),
            Variable('T', 'Torque', 'Torque in pound-feet', 'lb-ft'),
            Variable('RPM', 'RPM', 'Revolutions per minute', 'rpm'),
        ),
        units=(
            UnitSystem('imperial', 'hp', {'kW': 0.746, 'W': 746}),
        ),
        examples=(
            FormulaExample('Motor producing 100 lb-ft at 1800 RPM', {'T': 100, 'RPM': 1800}, 34.3, 'hp'),
        ),
        tags=('torque', 'power', 'horsepower', 'motor'),
    ),
    EngineeringFormula(
        id='belt-ratio',
        name='Belt Drive Ratio',
        formula='ratio = D2 / D1 = RPM1 / RPM2',
        description='Calculate speed ratio between driving and driven pulleys',
        category='mechanical',
        variables=(
            Variable('ratio', 'Speed Ratio', 'Ratio of speeds', 'dimensionless'),
            Variable('D1', 'Drive Pulley Diameter', 'Driving pulley diameter', 'in'),
            Variable('D2', 'Driven Pulley Diameter', 'Driven pulley diameter', 'in'),
            Variable('RPM1', 'Drive RPM', 'Driving pulley RPM', 'rpm'),
            Variable('RPM2', 'Driven RPM', 'Driven pulley RPM', 'rpm'),
        ),
        units=(
            UnitSystem('both', 'dimensionless', {}),
        ),
        examples=(
            FormulaExample('6 inch drive pulley to 12 inch driven pulley', {'D1': 6, 'D2': 12}, 2, 'ratio'),
        ),
        tags=('belt', 'pulley', 'ratio', 'gear', 'transmission'),
    ),

    # Electrical
    EngineeringFormula(
        id='ohms-law-voltage',
        name="Ohm's Law - Voltage",
        formula='V = I * R',
        description='Calculate voltage from current and resistance',
        category='electrical',
        variables=(
            Variable('V', 'Voltage', 'Electrical potential difference', 'V'),
            Variable('I', 'Current', 'Electric current', 'A'),
            Variable('R', 'Resistance', 'Electrical resistance', 'Ω'),
        ),
        units=(
            UnitSystem('both', 'V', {'kV': 0.001, 'mV': 1000}),
        ),
        examples=(
            FormulaExample('5 amperes through 10 ohm resistor', {'I': 5, 'R': 10}, 50, 'V'),
        ),
        tags=('ohm', 'voltage', 'current', 'resistance', 'electrical'),
    ),
    EngineeringFormula(
        id='electrical-power',
        name='Electrical Power',
        formula='P = V * I',
        description='Calculate electrical power from voltage and current',
        category='electrical',
        variables=(
            Variable('P', 'Power', 'Electrical power', 'W'),
            Variable('V', 'Voltage', 'Voltage', 'V'),
            Variable('I', 'Current', 'Current', 'A'),
        ),
        units=(
            UnitSystem('both', 'W', {'kW': 0.001, 'hp': 0.00134, 'MW': 0.000001}),
        ),
        examples=(
            FormulaExample('120V circuit with 10A current', {'V': 120, 'I': 10}, 1200, 'W'),
        ),
        tags=('power', 'voltage', 'current', 'electrical', 'watt'),
    ),
    EngineeringFormula(
        id='motor-efficiency',
        name='Motor Efficiency',
        formula='η = (P_out / P_in) * 100',
        description='Calculate motor efficiency percentage',
        category='electrical',
        variables=(
            Variable('η', 'Efficiency', 'Motor efficiency', '%'),
            Variable('P_out', 'Output Power', 'Mechanical power output', 'W'),
            Variable('P_in', 'Input Power', 'Electrical power input', 'W'),
        ),
        units=(
            UnitSystem('both', '%', {'decimal': 0.01}),
        ),
        examples=(
            FormulaExample('Motor with 750W output and 850W input', {'P_out': 750, 'P_in': 850}, 88.2, '%'),
        ),
        tags=('efficiency', 'motor', 'power', 'electrical'),
    ),

    # Fluid dynamics
    EngineeringFormula(
        id='flow-rate-pipe',
        name='Flow Rate in Pipe',
        formula='Q = A * v = π * (D/2)² * v',
        description='Calculate volumetric flow rate in a pipe',
        category='fluid_dynamics',
        variables=(
            Variable('Q', 'Flow Rate', 'Volumetric flow rate', 'm³/s'),
            Variable('A', 'Area', 'Cross-sectional area', 'm²'),
            Variable('v', 'Velocity', 'Fluid velocity', 'm/s'),
            Variable('D', 'Diameter', 'Pipe diameter', 'm'),
        ),
        units=(
            UnitSystem('metric', 'm³/s', {'L/min': 60000, 'gpm': 15850}),
            UnitSystem('imperial', 'gpm', {'m³/s': 0.0000631, 'ft³/s': 0.00223}),
        ),
        examples=(
            FormulaExample('0.1m diameter pipe with 2 m/s velocity', {'D': 0.1, 'v': 2}, 0.0157, 'm³/s'),
        ),
        tags=('flow', 'pipe', 'velocity', 'fluid', 'volume'),
    ),

    # Structural
    EngineeringFormula(
        id='beam-moment',
        name='Simply Supported Beam Moment',
        formula='M = (w * L²) / 8',
        description='Maximum moment in simply supported beam with uniform load',
        category='structural',
        variables=(
            Variable('M', 'Moment', 'Bending moment', 'N⋅m'),
            Variable('w', 'Load', 'Uniform distributed load', 'N/m'),
            Variable('L', 'Length', 'Beam span length', 'm'),
        ),
        units=(
            UnitSystem('metric', 'N⋅m', {'kN⋅m': 0.001, 'lb⋅ft': 0.738}),
            UnitSystem('imperial', 'lb⋅ft', {'N⋅m': 1.356, 'kip⋅ft': 0.001}),
        ),
        examples=(
            FormulaExample('5m beam with 1000 N/m uniform load', {'w': 1000, 'L': 5}, 3125, 'N⋅m'),
        ),
        tags=('beam', 'moment', 'structural', 'load', 'bending'),
    ),

    # Thermodynamics
    EngineeringFormula(
        id='heat-transfer-conduction',
        name='Heat Conduction',
        formula='q = k * A * (T1 - T2) / L',
        description='Heat transfer rate through conduction',
        category='thermodynamics',
        variables=(
            Variable('q', 'Heat Rate', 'Heat transfer rate', 'W'),
            Variable('k', 'Thermal Conductivity', 'Material thermal conductivity', 'W/(m⋅K)'),
            Variable('A', 'Area', 'Heat transfer area', 'm²'),
            Variable('T1', 'Hot Temperature', 'Higher temperature', 'K'),
            Variable('T2', 'Cold Temperature', 'Lower temperature', 'K'),
            Variable('L', 'Thickness', 'Material thickness', 'm'),
        ),
        units=(
            UnitSystem('metric', 'W', {'kW': 0.001, 'BTU/hr': 3.412}),
        ),
        examples=(
            FormulaExample(
                'Steel wall 0.01m thick, 1m², k=50 W/(m⋅K), ΔT=100K',
                {'k': 50, 'A': 1, 'T1': 373, 'T2': 273, 'L': 0.01},
                500000,
                'W',
            ),
        ),
        tags=('heat', 'conduction', 'thermal', 'temperature'),
    ),
)


class FormulaCatalog:
    """Read-only view over a formula tuple with id and category indexes."""

    def __init__(self, formulas: Iterable[EngineeringFormula] = ENGINEERING_FORMULAS):
        self.formulas: Tuple[EngineeringFormula, ...] = tuple(formulas)

        self._by_id: Dict[str, EngineeringFormula] = {}
        by_category: Dict[str, List[EngineeringFormula]] = defaultdict(list)
        for formula in self.formulas:
            if formula.id in self._by_id:
                raise ValueError(f"Duplicate formula id: {formula.id}")
            self._by_id[formula.id] = formula
            by_category[formula.category].append(formula)

        self._by_category: Dict[str, Tuple[EngineeringFormula, ...]] = {
            category: tuple(items) for category, items in by_category.items()
        }

    def __len__(self) -> int:
        return len(self.formulas)

    def __iter__(self):
        return iter(self.formulas)

    def get_by_id(self, formula_id: str) -> Optional[EngineeringFormula]:
        """Look up a formula by id."""
        return self._by_id.get(formula_id)

    def get_by_category(self, category: str) -> Tuple[EngineeringFormula, ...]:
        """All formulas in a category, in catalog order."""
        return self._by_category.get(category, ())

    @property
    def categories(self) -> List[str]:
        return list(self._by_category)

    def search(self, query: str) -> List[EngineeringFormula]:
        """
        Substring search over names, descriptions, tags and variables.

        Args:
            query: Free text; matched case-insensitively as one substring

        Returns:
            Matching formulas in catalog order
        """
        lower_query = query.lower()
        matches = []

        for formula in self.formulas:
            if (
                lower_query in formula.name.lower()
                or lower_query in formula.description.lower()
                or any(lower_query in tag.lower() for tag in formula.tags)
                or any(
                    lower_query in variable.name.lower()
                    or lower_query in variable.description.lower()
                    for variable in formula.variables
                )
            ):
                matches.append(formula)

        return matches


_default_catalog: Optional[FormulaCatalog] = None


def get_default_catalog() -> FormulaCatalog:
    """Catalog over ``ENGINEERING_FORMULAS``, built on first use."""
    global _default_catalog
    if _default_catalog is None:
        _default_catalog = FormulaCatalog()
    return _default_catalog
