"""
Bouldering grade parsing and conversion.

Grades are stored in V-scale ("V0".."V17"). Font (French) grades are accepted
on input and converted using an approximate lookup table.
"""

import re
from enum import Enum
from typing import Dict, List, Union


class GradeSystem(str, Enum):
    """Supported grading systems."""
    V_SCALE = "v-scale"
    FONT = "font"


MAX_V_GRADE = 17

V_GRADES: List[str] = [f"V{n}" for n in range(MAX_V_GRADE + 1)]

# Approximate V-scale to Font mapping. V16 and V17 have no entry.
V_TO_FONT: Dict[str, str] = {
    "V0": "4",
    "V1": "5",
    "V2": "5+",
    "V3": "6a+",
    "V4": "6b+",
    "V5": "6c",
    "V6": "7a",
    "V7": "7a+",
    "V8": "7b+",
    "V9": "7c",
    "V10": "7c+",
    "V11": "8a",
    "V12": "8a+",
    "V13": "8b",
    "V14": "8b+",
    "V15": "8c",
}

FONT_TO_V: Dict[str, str] = {font: v for v, font in V_TO_FONT.items()}

FONT_GRADES: List[str] = list(V_TO_FONT.values())

_V_GRADE_PATTERN = re.compile(r"^[vV](\d{1,2})$")


def v_to_font(v_grade: str) -> str:
    """Convert a V-scale grade to Font, returning the input when unmapped."""
    return V_TO_FONT.get(v_grade, v_grade)


def font_to_v(font_grade: str) -> str:
    """Convert a Font grade to V-scale, returning the input when unmapped."""
    return FONT_TO_V.get(font_grade.lower(), font_grade)


def parse_grade(grade: Union[str, int]) -> int:
    """
    Parse a grade into its integer difficulty (V0 = 0).

    Accepts V-scale strings ("V5", "v5"), Font grades ("6c") and plain
    integers. Digit-only strings are Font grades ("5" is V1).

    Raises:
        ValueError: If the grade is not recognised or out of range
    """
    if isinstance(grade, bool):
        raise ValueError(f"Invalid grade: {grade!r}")

    if isinstance(grade, int):
        difficulty = grade
    else:
        text = str(grade).strip()
        match = _V_GRADE_PATTERN.match(text)
        if match:
            difficulty = int(match.group(1))
        elif text.lower() in FONT_TO_V:
            difficulty = int(FONT_TO_V[text.lower()][1:])
        else:
            raise ValueError(f"Unrecognised grade: {grade!r}")

    if difficulty < 0 or difficulty > MAX_V_GRADE:
        raise ValueError(f"Grade out of range V0-V{MAX_V_GRADE}: {grade!r}")
    return difficulty


def normalize_grade(grade: Union[str, int]) -> str:
    """Return the canonical V-scale label for any accepted grade."""
    return f"V{parse_grade(grade)}"


def display_grade(v_grade: str, system: GradeSystem = GradeSystem.V_SCALE) -> str:
    """Format a stored V-scale grade for the user's preferred system."""
    if system == GradeSystem.FONT:
        return v_to_font(v_grade)
    return v_grade


def grades_for_system(system: GradeSystem) -> List[str]:
    """All grades in ascending order for a grading system."""
    if system == GradeSystem.FONT:
        return list(FONT_GRADES)
    return list(V_GRADES)
