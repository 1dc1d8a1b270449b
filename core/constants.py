"""
Constants and configuration values for the calculation engine.
"""
import math

# Characters accepted by the safe evaluator after normalization
ALLOWED_EXPRESSION_PATTERN = r'^[0-9+\-*/.() ]+$'

# Rounding applied to evaluation results
ARITHMETIC_PRECISION = 2   # OCR-derived arithmetic
FORMULA_PRECISION = 6      # formula substitution

# Confidence attached to a successful evaluation
EVALUATION_CONFIDENCE = 0.95

# Fixed base confidences per suggestion rule
SUGGESTION_CONFIDENCE = {
    'correction': 0.8,
    'alternative': 0.7,
    'unit_sweep': 0.95,
    'formula_common': 0.6,
    'constant': 0.7,
    'rpm_to_fpm': 0.9,
    'rpm_to_linear': 0.85,
    'explanation': 0.7,
}

# Formula recommendation scoring
FORMULA_BASE_CONFIDENCE = 0.5
FORMULA_KEYWORD_BOOST = 0.1
FORMULA_VALUES_BOOST = 0.1
FORMULA_MAX_CONFIDENCE = 0.95
FORMULA_MIN_WORD_LENGTH = 3

# Result list bounds
MAX_QUERY_RECOMMENDATIONS = 8
MAX_CANVAS_SUGGESTIONS = 10
MAX_RELEVANT_FORMULAS = 5
MAX_UNIT_CONVERSIONS = 3
MAX_COMMON_FORMULA_SUGGESTIONS = 3
MAX_FORMULA_EXAMPLES = 3

# Constant matcher tolerance (ratio band around the constant)
CONSTANT_MATCH_LOWER = 0.9
CONSTANT_MATCH_UPPER = 1.1

# Multi-engine OCR
OCR_CONFIDENCE_THRESHOLD = 0.7
OCR_ENGINE_PRIMARY = 'primary'
OCR_ENGINE_FALLBACK = 'fallback'

# Characters Tesseract is allowed to emit for calculator displays
TESSERACT_CHAR_WHITELIST = '0123456789+-*/=.()×÷√^'

# Prompt for the vision OCR model
OCR_PROMPTS = {
    'calculator': '<image>\nFree OCR. Transcribe the calculator display or handwritten arithmetic exactly.',
    'free_ocr': '<image>\nFree OCR.',
}

# Default OCR parameters
DEFAULT_OCR_PARAMS = {
    'max_tokens': 512,
    'temperature': 0.0,
    'max_image_size': 2048,
}

# Known constants for the constant matcher and formula substitution
KNOWN_CONSTANTS = {
    'pi': math.pi,
    'e': math.e,
    'c': 299792458.0,   # speed of light
    'g': 9.81,          # gravity
    'phi': 1.618033988749895,  # golden ratio
}

# Keyword -> engineering categories
CATEGORY_KEYWORDS = {
    'motor': ['mechanical', 'electrical'],
    'rpm': ['mechanical'],
    'speed': ['mechanical'],
    'torque': ['mechanical'],
    'power': ['mechanical', 'electrical'],
    'voltage': ['electrical'],
    'current': ['electrical'],
    'resistance': ['electrical'],
    'flow': ['fluid_dynamics'],
    'pipe': ['fluid_dynamics'],
    'beam': ['structural', 'civil'],
    'load': ['structural', 'civil'],
    'stress': ['structural', 'materials'],
    'heat': ['thermodynamics'],
    'temperature': ['thermodynamics'],
    'pressure': ['fluid_dynamics', 'thermodynamics'],
    'efficiency': ['mechanical', 'electrical'],
    'belt': ['mechanical'],
    'pulley': ['mechanical'],
    'gear': ['mechanical'],
    'pump': ['fluid_dynamics', 'mechanical'],
    'conveyor': ['mechanical'],
    'shaft': ['mechanical'],
    'bearing': ['mechanical'],
}

# Unit spellings recognized in conversational queries
UNIT_PATTERNS = {
    'rpm': ['rpm', 'rev/min', 'revolutions per minute'],
    'fpm': ['fpm', 'ft/min', 'feet per minute'],
    'speed': ['m/s', 'ft/s', 'mph', 'km/h'],
    'power': ['hp', 'kw', 'watts', 'horsepower'],
    'voltage': ['v', 'volts', 'kv'],
    'current': ['a', 'amps', 'amperes', 'ma'],
    'flow': ['gpm', 'lpm', 'm³/s', 'cfm'],
    'pressure': ['psi', 'bar', 'pa', 'kpa'],
    'temperature': ['°c', '°f', 'celsius', 'fahrenheit', 'kelvin'],
}

# Linear conversion factors relative to each category's base unit
UNIT_CONVERSIONS = {
    'length': {
        'mm': 1,
        'cm': 10,
        'm': 1000,
        'km': 1000000,
        'in': 25.4,
        'ft': 304.8,
        'yd': 914.4,
        'mi': 1609344,
    },
    'area': {
        'mm²': 1,
        'cm²': 100,
        'm²': 1000000,
        'in²': 645.16,
        'ft²': 92903.04,
    },
    'volume': {
        'ml': 1,
        'l': 1000,
        'm³': 1000000,
        'in³': 16387.064,
        'ft³': 28316846.592,
    },
    'mass': {
        'g': 1,
        'kg': 1000,
        'lb': 453.592,
        'oz': 28.3495,
    },
}

# Common formulas matched against whiteboard text by variable overlap
COMMON_FORMULAS = {
    # Geometry
    'circle_area': 'pi * r^2',
    'circle_circumference': '2 * pi * r',
    'rectangle_area': 'length * width',
    'triangle_area': '0.5 * base * height',
    'sphere_volume': '(4/3) * pi * r^3',
    'cylinder_volume': 'pi * r^2 * h',
    # Physics
    'kinetic_energy': '0.5 * m * v^2',
    'potential_energy': 'm * g * h',
    'force': 'm * a',
    'momentum': 'm * v',
    'power': 'v * i',
    'ohms_law': 'v / r',
    # Engineering
    'beam_deflection': '(5 * w * l^4) / (384 * e * i)',
    'stress': 'f / a',
    'strain': 'delta_l / l',
    'pressure': 'f / a',
    # Finance
    'simple_interest': 'p * r * t',
    'compound_interest': 'p * (1 + r)^t',
    'present_value': 'fv / (1 + r)^t',
    'future_value': 'pv * (1 + r)^t',
}

# Sample values used when previewing a common formula
SAMPLE_VARIABLE_VALUES = {
    'r': 5, 'radius': 5,
    'h': 10, 'height': 10,
    'w': 8, 'width': 8, 'length': 8,
    'm': 2, 'mass': 2,
    'v': 20, 'velocity': 20, 'speed': 20,
    'a': 9.81, 'acceleration': 9.81,
    't': 3, 'time': 3,
    'f': 100, 'force': 100,
}

# Words that are functions or constants, never formula variables
RESERVED_WORDS = {'sin', 'cos', 'tan', 'log', 'ln', 'sqrt', 'abs', 'pi', 'e'}

# Regex patterns naming the kind of calculation a query asks for
CALCULATION_TYPE_PATTERNS = {
    'rpm_conversion': r'rpm.*(?:fpm|feet|speed|linear)',
    'power_calculation': r'(?:power|horsepower|watts).*(?:torque|rpm)',
    'belt_calculation': r'(?:belt|pulley).*(?:ratio|speed|diameter)',
    'flow_calculation': r'(?:flow|gpm|pipe).*(?:diameter|velocity)',
    'electrical_power': r'(?:voltage|current).*(?:power|watts)',
    'motor_efficiency': r'(?:efficiency|motor).*(?:input|output)',
}
