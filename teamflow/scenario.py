"""YAML staffing scenarios.

A scenario lists applicants with their skills, the team requirements, and
optionally the team's current role assignments:

.. code-block:: yaml

    applicants:
      alice: [skill-1, skill-2]
      bob: [skill-2, skill-3]
    requirements:
      - skills: [skill-1]
        count: 1
      - skills: [skill-2]
        count: 2
    assignments:
      alice: [skill-1]
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Union

import jsonschema
import yaml

from teamflow.errors import InvalidArgumentError
from teamflow.logging import get_logger
from teamflow.model import (
    Applicant,
    Skills,
    TeamRequirement,
    group_assignments,
    skill_set,
)

logger = get_logger(__name__)

_KEYED_SECTIONS = ("applicants", "assignments")


def _normalize_keys(data: Dict[Any, Any]) -> Dict[str, Any]:
    """Turn YAML 1.1 quirks (``yes:``, ``on:``, ``42:``) back into string keys."""
    return {str(key): value for key, value in data.items()}


def _load_schema() -> Dict[str, Any]:
    with (
        resources.files("teamflow.schemas")
        .joinpath("scenario.json")
        .open("r", encoding="utf-8")
    ) as f:
        return json.load(f)


@dataclass
class Scenario:
    """Parsed staffing scenario.

    Attributes:
        applicants (Dict[str, Applicant]): Applicants by name.
        requirements (List[TeamRequirement]): Team roles, distinct skill sets.
        assignments (Dict[str, Skills]): Current team, applicant name mapped to
            the skills of the role held.
    """

    applicants: Dict[str, Applicant] = field(default_factory=dict)
    requirements: List[TeamRequirement] = field(default_factory=list)
    assignments: Dict[str, Skills] = field(default_factory=dict)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> Scenario:
        return load_scenario_yaml(yaml_str)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> Scenario:
        return load_scenario_yaml(Path(path).read_text(encoding="utf-8"))

    def assignment_map(self) -> Dict[Applicant, Skills]:
        """Current assignments keyed by :class:`Applicant`."""
        return {
            self.applicants[name]: skills for name, skills in self.assignments.items()
        }

    def team_roles_assignment(self) -> Dict[TeamRequirement, List[Applicant]]:
        """Current assignments grouped by requirement.

        Raises:
            UnmatchedAssignmentError: If an assignment matches no requirement.
        """
        return group_assignments(self.requirements, self.assignment_map())


def load_scenario_yaml(yaml_str: str) -> Scenario:
    """Parse and validate a scenario YAML document.

    Raises:
        jsonschema.ValidationError: If the document does not match the
            packaged scenario schema.
        InvalidArgumentError: If the document is well-formed but
            inconsistent, e.g. an assignment names an unknown applicant.
    """
    data = yaml.safe_load(yaml_str)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise InvalidArgumentError(
            "The provided YAML must map to a dictionary at top-level."
        )

    for section in _KEYED_SECTIONS:
        if isinstance(data.get(section), dict):
            data[section] = _normalize_keys(data[section])

    jsonschema.validate(data, _load_schema())

    applicants = {
        name: Applicant(name, skill_set(skills))
        for name, skills in data["applicants"].items()
    }

    requirements: List[TeamRequirement] = []
    seen: set = set()
    for entry in data["requirements"]:
        tr = TeamRequirement(entry.get("count", 1), skill_set(entry["skills"]))
        if tr.required_skills in seen:
            raise InvalidArgumentError(
                f"Duplicate requirement for skills {sorted(tr.required_skills)}"
            )
        seen.add(tr.required_skills)
        requirements.append(tr)

    assignments: Dict[str, Skills] = {}
    for name, skills in (data.get("assignments") or {}).items():
        if name not in applicants:
            raise InvalidArgumentError(
                f"Assignment refers to unknown applicant '{name}'"
            )
        assignments[name] = skill_set(skills)

    logger.debug(
        "Loaded scenario: %d applicants, %d requirements, %d assignments",
        len(applicants),
        len(requirements),
        len(assignments),
    )
    return Scenario(
        applicants=applicants, requirements=requirements, assignments=assignments
    )
