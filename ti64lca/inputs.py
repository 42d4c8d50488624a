"""
User Input Collection

Validation of the four run inputs and an interactive prompt that keeps
asking until each answer is acceptable.
"""

import math
from typing import Callable, NamedTuple

from .coefficients import CATEGORIES, REGIONS, category_label
from .errors import InputValidationError


class RunInputs(NamedTuple):
    final_powder_mass: float    # kg
    impact_category: str
    region: str
    target_diameter: float      # um


def _positive_real(value, name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise InputValidationError(f"{name} must be a number, got {value!r}") from e
    if not math.isfinite(number) or number <= 0:
        raise InputValidationError(f"{name} must be a positive finite number, got {value!r}")
    return number


def _category(value) -> str:
    code = str(value).strip()
    # accept case-insensitive codes, e.g. 'htpc' -> 'HTPc'
    matches = [c for c in CATEGORIES if c.lower() == code.lower()]
    if not matches:
        raise InputValidationError(
            f"Impact category must be one of {', '.join(CATEGORIES)}, got {value!r}"
        )
    return matches[0]


def _region(value) -> str:
    code = str(value).strip().upper()
    if code not in REGIONS:
        raise InputValidationError(f"Region must be one of {', '.join(REGIONS)}, got {value!r}")
    return code


def validate_inputs(final_powder_mass, impact_category, region, target_diameter) -> RunInputs:
    """Normalize and check the run inputs; raises InputValidationError on the first bad one."""
    return RunInputs(
        final_powder_mass=_positive_real(final_powder_mass, 'Final powder mass'),
        impact_category=_category(impact_category),
        region=_region(region),
        target_diameter=_positive_real(target_diameter, 'Target diameter'),
    )


def _ask(prompt: str, parse: Callable, input_fn, print_fn):
    while True:
        answer = input_fn(prompt)
        try:
            return parse(answer)
        except InputValidationError as e:
            print_fn(f"  ✗ {e}")


def prompt_inputs(input_fn=input, print_fn=print, **given) -> RunInputs:
    """
    Ask for every input not already supplied in `given`.

    `given` uses the RunInputs field names; supplied values are validated
    like typed answers but are not re-asked.
    """
    parsers = {
        'final_powder_mass': (
            "Final powder mass [kg]: ",
            lambda v: _positive_real(v, 'Final powder mass'),
        ),
        'impact_category': (
            "Impact category (" + ", ".join(CATEGORIES) + "): ",
            _category,
        ),
        'region': (
            "Region (" + " | ".join(REGIONS) + "): ",
            _region,
        ),
        'target_diameter': (
            "Target particle diameter [um]: ",
            lambda v: _positive_real(v, 'Target diameter'),
        ),
    }

    values = {}
    for name, (prompt, parse) in parsers.items():
        if given.get(name) is not None:
            values[name] = parse(given[name])
        else:
            values[name] = _ask(prompt, parse, input_fn, print_fn)
            if name == 'impact_category':
                print_fn(f"  → {category_label(values[name])}")
    return RunInputs(**values)
