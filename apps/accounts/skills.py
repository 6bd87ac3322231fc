# apps/accounts/skills.py
"""
Role-tagged skills stored in ``Profile.skills``.

The JSON blob is parsed into exactly one of ``FarmerSkills`` or
``LaborerSkills`` based on the profile's role. Parsing happens when the
profile is validated, so read sites get a typed record instead of
re-checking the raw dict.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Union


@dataclass(frozen=True)
class FarmerSkills:
    crops: List[str] = field(default_factory=list)
    farming_type: str = ""
    farm_size: str = ""
    bio: str = ""
    languages: List[str] = field(default_factory=list)

    role = "farmer"


@dataclass(frozen=True)
class LaborerSkills:
    crops: List[str] = field(default_factory=list)
    availability: str = ""
    will_relocate: bool = False
    wage_expectation: str = ""
    bio: str = ""
    languages: List[str] = field(default_factory=list)
    work_types: List[str] = field(default_factory=list)

    role = "laborer"


Skills = Union[FarmerSkills, LaborerSkills]

SKILLS_BY_ROLE = {
    "farmer": FarmerSkills,
    "laborer": LaborerSkills,
}

_MAX_ITEMS = 50
_MAX_TEXT = 1000


def _check_value(name: str, value: Any, expected: Any) -> Any:
    if expected is bool:
        if not isinstance(value, bool):
            raise ValueError(f"'{name}' must be true or false.")
        return value
    if expected is str:
        if not isinstance(value, str):
            raise ValueError(f"'{name}' must be text.")
        return value.strip()[:_MAX_TEXT]
    # list of strings
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"'{name}' must be a list of strings.")
    if len(value) > _MAX_ITEMS:
        raise ValueError(f"'{name}' accepts at most {_MAX_ITEMS} entries.")
    return [v.strip() for v in value if v.strip()]


def parse_skills(role: str, raw: Optional[Dict[str, Any]]) -> Skills:
    """Validate ``raw`` against the skills shape for ``role``."""
    cls = SKILLS_BY_ROLE.get(role)
    if cls is None:
        raise ValueError(f"Unknown role '{role}'.")
    if raw is None:
        return cls()
    if not isinstance(raw, dict):
        raise ValueError("Skills must be an object.")

    known = {f.name: f for f in fields(cls)}
    unknown = sorted(set(raw) - set(known))
    if unknown:
        raise ValueError(f"Unexpected skill fields for {role}: {', '.join(unknown)}.")

    hints = {"bool": bool, "str": str}
    values = {}
    for name, value in raw.items():
        expected = hints.get(str(known[name].type), list)
        values[name] = _check_value(name, value, expected)
    return cls(**values)

