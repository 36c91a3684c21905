import json
import logging
from pathlib import Path

import pytest

from teamflow import cli

DATA = Path(__file__).parent.parent / "data"


def extract_json_from_stdout(output: str) -> str:
    """Return the first balanced JSON object in ``output``."""
    json_start = output.find("{")
    if json_start == -1:
        return output

    depth = 0
    for i in range(json_start, len(output)):
        if output[i] == "{":
            depth += 1
        elif output[i] == "}":
            depth -= 1
            if depth == 0:
                return output[json_start : i + 1]
    return output


def test_no_arguments_prints_help(capsys) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.main([])
    assert exc_info.value.code == 0
    assert "usage: teamflow" in capsys.readouterr().out


def test_match_prints_table(capsys) -> None:
    cli.main(["match", str(DATA / "team.yaml")])
    out = capsys.readouterr().out
    assert "Applicant" in out
    assert "Total flow: 3" in out
    assert "(unassigned)" not in out


def test_match_json_to_stdout(capsys) -> None:
    cli.main(["match", str(DATA / "team.yaml"), "--stdout"])
    result = json.loads(extract_json_from_stdout(capsys.readouterr().out))
    assert result["flow"] == 3
    assert set(result["assignments"]) == {"applicant-1", "applicant-2", "applicant-3"}
    assert result["unassigned"] == []


def test_match_starts_from_current_assignments(capsys) -> None:
    cli.main(["match", str(DATA / "staffed_team.yaml"), "--stdout"])
    result = json.loads(extract_json_from_stdout(capsys.readouterr().out))
    assert result["flow"] == 3
    assert result["assignments"] == {
        "applicant-1": ["skill-1"],
        "applicant-2": ["skill-2"],
        "applicant-3": ["skill-2"],
    }


def test_match_reroutes_seeded_assignment(tmp_path: Path, capsys) -> None:
    """a1 is seeded on the only role a2 can fill, so a1 moves to the other one."""
    path = tmp_path / "reroute.yaml"
    path.write_text(
        "applicants: {a1: [x, y], a2: [x]}\n"
        "requirements: [{skills: [x]}, {skills: [y]}]\n"
        "assignments: {a1: [x]}\n"
    )
    cli.main(["match", str(path), "--stdout"])
    result = json.loads(extract_json_from_stdout(capsys.readouterr().out))
    assert result["flow"] == 2
    assert result["assignments"] == {"a1": ["y"], "a2": ["x"]}


def test_demand_writes_results_file(tmp_path: Path, capsys) -> None:
    results_path = tmp_path / "out" / "demand.json"
    cli.main(
        ["demand", str(DATA / "staffed_team.yaml"), "--results", str(results_path)]
    )

    out = capsys.readouterr().out
    assert "Roles in demand:" in out
    assert "  - skill-3" in out
    assert f"Results written to: {results_path}" in out

    result = json.loads(results_path.read_text())
    assert result == {"roles_in_demand": [["skill-1"], ["skill-2"], ["skill-3"]]}


def test_demand_without_assignments(capsys) -> None:
    """Five seats and three applicants: something is always left open."""
    cli.main(["demand", str(DATA / "team.yaml"), "--stdout"])
    result = json.loads(extract_json_from_stdout(capsys.readouterr().out))
    assert result["roles_in_demand"]


def test_missing_file_exits_with_error(tmp_path: Path, capsys) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["match", str(tmp_path / "nope.yaml")])
    assert exc_info.value.code == 1
    assert "Scenario file not found" in capsys.readouterr().out


@pytest.mark.parametrize(
    "text,error",
    [
        ("applicants: {}\n", "ValidationError"),
        ("applicants: [\n", "ParserError"),
        (
            "applicants: {a: [x]}\nrequirements: [{skills: [y]}]\n"
            "assignments: {a: [y]}\n",
            "InvalidStateError",
        ),
    ],
)
def test_bad_scenario_exits_with_error(tmp_path: Path, capsys, text, error) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text(text)
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["match", str(path)])
    assert exc_info.value.code == 1
    out = capsys.readouterr().out
    assert "❌ ERROR: Failed to run scenario" in out
    assert error in out


def test_verbose_enables_debug(caplog) -> None:
    with caplog.at_level(logging.DEBUG, logger="teamflow"):
        cli.main(["-v", "match", str(DATA / "team.yaml")])
        assert logging.getLogger("teamflow").level == logging.DEBUG
    assert "Loaded scenario: 3 applicants" in caplog.text


def test_quiet_hides_info() -> None:
    cli.main(["--quiet", "match", str(DATA / "team.yaml")])
    assert logging.getLogger("teamflow").level == logging.WARNING


def test_format_helpers() -> None:
    assert cli._format_duration(0.1234) == "123.4 ms"
    assert cli._format_duration(2.5) == "2.50 s"
    assert cli._format_skills(frozenset({"b", "a"})) == "a, b"
    assert cli._format_skills([]) == "(none)"
    assert cli._format_table(["h"], []) == ""
