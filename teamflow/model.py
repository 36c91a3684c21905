"""Staffing domain model: applicants and the team requirements they fill.

A requirement's skill set doubles as its identity in results: role
assignments map an applicant to the ``required_skills`` of the role held.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import AbstractSet, Dict, FrozenSet, Iterable, List, Mapping

from teamflow.errors import InvalidArgumentError, UnmatchedAssignmentError

#: A requirement signature: the unordered set of skills a role needs.
Skills = FrozenSet[str]


def skill_set(skills: Iterable[str]) -> Skills:
    """Normalize any iterable of skill names to a frozenset."""
    if isinstance(skills, str):
        return frozenset((skills,))
    return frozenset(skills)


@dataclass(frozen=True)
class Applicant:
    """A person who may be assigned to a team role.

    Attributes:
        name (str): Display name, also part of the applicant's identity.
        skills (FrozenSet[str]): Skills the applicant has.
    """

    name: str
    skills: Skills = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        object.__setattr__(self, "skills", skill_set(self.skills))

    def has_skills(self, required: AbstractSet[str]) -> bool:
        """True when the applicant has every skill in ``required``."""
        return self.skills.issuperset(required)


@dataclass(frozen=True)
class TeamRequirement:
    """A role the team needs filled, possibly by several people.

    Attributes:
        team_members_required (int): Head-count for this role, at least 1.
        required_skills (FrozenSet[str]): Skills every holder must have.
    """

    team_members_required: int
    required_skills: Skills = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        count = self.team_members_required
        if isinstance(count, bool) or not isinstance(count, int) or count < 1:
            raise InvalidArgumentError(
                f"team_members_required must be a positive integer, got {count!r}"
            )
        object.__setattr__(self, "required_skills", skill_set(self.required_skills))


def has_skills(applicant: Applicant, required: AbstractSet[str]) -> bool:
    """Qualification predicate: the applicant has all required skills."""
    return applicant.has_skills(required)


def new_applicant(name: str, *skills: str) -> Applicant:
    return Applicant(name, frozenset(skills))


def new_team_requirement(team_members_required: int, *skills: str) -> TeamRequirement:
    return TeamRequirement(team_members_required, frozenset(skills))


def group_assignments(
    team_requirements: Iterable[TeamRequirement],
    role_assignments: Mapping[Applicant, AbstractSet[str]],
) -> Dict[TeamRequirement, List[Applicant]]:
    """Group assigned applicants under the requirement whose skills they hold.

    Raises:
        UnmatchedAssignmentError: If an assignment's skills equal no
            requirement's skills.
    """
    by_skills = {tr.required_skills: tr for tr in team_requirements}
    grouped: Dict[TeamRequirement, List[Applicant]] = {}
    for applicant, skills in role_assignments.items():
        tr = by_skills.get(skill_set(skills))
        if tr is None:
            raise UnmatchedAssignmentError(
                f"Job assignment {applicant!r} can not be matched "
                "to any of the team requirements"
            )
        grouped.setdefault(tr, []).append(applicant)
    return grouped
