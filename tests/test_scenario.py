from pathlib import Path
from textwrap import dedent

import jsonschema
import pytest

from teamflow.errors import InvalidArgumentError, UnmatchedAssignmentError
from teamflow.model import new_applicant, new_team_requirement
from teamflow.scenario import Scenario, load_scenario_yaml

DATA = Path(__file__).parent / "data"


def test_load_from_path():
    scenario = Scenario.from_path(DATA / "team.yaml")

    assert set(scenario.applicants) == {"applicant-1", "applicant-2", "applicant-3"}
    assert scenario.applicants["applicant-2"] == new_applicant(
        "applicant-2", "skill-1", "skill-2", "skill-3"
    )
    assert scenario.requirements == [
        new_team_requirement(1, "skill-1"),
        new_team_requirement(2, "skill-2"),
        new_team_requirement(2, "skill-3"),
    ]
    assert scenario.assignments == {}


def test_assignments():
    scenario = Scenario.from_path(DATA / "staffed_team.yaml")
    a1 = scenario.applicants["applicant-1"]
    a3 = scenario.applicants["applicant-3"]

    assert scenario.assignments["applicant-1"] == frozenset({"skill-1"})
    assert scenario.assignment_map()[a1] == frozenset({"skill-1"})

    grouped = scenario.team_roles_assignment()
    assert grouped[new_team_requirement(1, "skill-1")] == [a1]
    assert a3 in grouped[new_team_requirement(2, "skill-2")]


def test_numeric_names_become_strings():
    scenario = Scenario.from_yaml(
        dedent(
            """
            applicants:
              42: [x]
            requirements:
              - skills: [x]
            assignments:
              42: [x]
            """
        )
    )
    assert "42" in scenario.applicants
    assert scenario.assignments == {"42": frozenset({"x"})}


def test_top_level_must_be_mapping():
    with pytest.raises(InvalidArgumentError, match="dictionary"):
        load_scenario_yaml("- just\n- a list\n")


@pytest.mark.parametrize(
    "text",
    [
        "",
        "applicants: {}\n",
        "applicants: {}\nrequirements: []\nextra: 1\n",
        "applicants: {a: [x]}\nrequirements: [{skills: [x], count: 0}]\n",
        "applicants: {a: x}\nrequirements: []\n",
        "applicants: {a: [x]}\nrequirements: [{skills: [x], size: 2}]\n",
    ],
)
def test_schema_violations(text):
    with pytest.raises(jsonschema.ValidationError):
        load_scenario_yaml(text)


def test_duplicate_requirement_rejected():
    text = "applicants: {}\nrequirements: [{skills: [x, y]}, {skills: [y, x]}]\n"
    with pytest.raises(InvalidArgumentError, match="Duplicate requirement"):
        load_scenario_yaml(text)


def test_assignment_to_unknown_applicant_rejected():
    text = (
        "applicants: {a: [x]}\nrequirements: [{skills: [x]}]\n"
        "assignments: {b: [x]}\n"
    )
    with pytest.raises(InvalidArgumentError, match="unknown applicant 'b'"):
        load_scenario_yaml(text)


def test_assignment_to_unknown_role():
    scenario = load_scenario_yaml(
        "applicants: {a: [x, y]}\nrequirements: [{skills: [x]}]\n"
        "assignments: {a: [y]}\n"
    )
    with pytest.raises(UnmatchedAssignmentError):
        scenario.team_roles_assignment()
