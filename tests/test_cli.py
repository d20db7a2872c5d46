"""
Tests for the command-line interface and the case pipeline.

These tests verify:
1. The pipeline runs every stage for criminal cases and the lens only for civil ones
2. CLI commands print summaries or the JSON envelope
3. Bad case files fail with a clear error and exit code 1
4. The CLI never writes anything back
"""

import copy
import json
from datetime import date

import pytest

from casereason.cli.main import create_parser, format_status_badge, main
from casereason.cli.pipeline import (
    SAMPLE_CASE,
    analyse_case,
    build_envelope,
    error_envelope,
    parse_case,
)
from casereason.config import EngineSettings
from casereason.errors import CaseInputError
from casereason.lenses.base import PillarStatus
from casereason.lenses.registry import build_default_registry
from casereason.serialization import to_jsonable
from casereason.strategy.facts import RouteType
from casereason.strategy.normalizer import CIVIL_REDACTION


TODAY = "2024-04-01"

HOUSING_CASE = {
    "practice_area": "housing_disrepair",
    "documents": [],
    "facts": {
        "hazard_type": "Damp and mould",
        "notice_date": "2024-01-01",
        "vulnerability_flags": ["child"],
    },
}


def make_analysis(data=SAMPLE_CASE, reference_date=date(2024, 4, 1)):
    case_input = parse_case(data, "test", reference_date)
    return analyse_case(case_input, build_default_registry(), EngineSettings())


@pytest.fixture
def case_file(tmp_path):
    def write(data):
        path = tmp_path / "case.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        return str(path)
    return write


# =============================================================================
# PIPELINE TESTS
# =============================================================================

class TestPipeline:
    """Test pipeline orchestration."""

    def test_sample_case_strategies(self):
        analysis = make_analysis()
        assert [s.id for s in analysis.normalized_strategies] == [
            "strategy-intent-downgrade",
            "strategy-disclosure-pressure",
            "strategy-identification-attack",
            "strategy-controlled-plea",
            "strategy-pace-breach",
        ]
        assert all(s.provisional for s in analysis.normalized_strategies)

    def test_sample_case_is_ready_with_gaps(self):
        analysis = make_analysis()
        assert analysis.can_commit_strategy
        assert analysis.graph.has_disclosure_gaps
        assert analysis.checklist is not None
        assert analysis.banner is None
        assert analysis.graph.contradictions == ()

    def test_route_details_from_case(self):
        analysis = make_analysis()
        assert set(analysis.route_plans) == set(RouteType)
        snapshot = analysis.route_plans[RouteType.FIGHT_CHARGE].artifacts[0].content
        assert "Client: A. Sample" in snapshot
        assert "Date: 2024-04-01" in snapshot

    def test_civil_case_has_no_strategies(self):
        analysis = make_analysis(HOUSING_CASE, date(2024, 2, 1))
        assert analysis.normalized_strategies == []
        assert analysis.route_plans == {}
        assert analysis.checklist is None
        assert analysis.lens.status_of("compliance_enforcement") is PillarStatus.UNSAFE

    def test_route_output_is_screened_for_civil_terms(self):
        data = copy.deepcopy(SAMPLE_CASE)
        bundle = data["documents"][1]["extracted_json"]["criminalMeta"]
        bundle["prosecutionEvidence"].append(
            {"type": "CCTV", "content": "CCTV per Part 36 offer", "status": "missing"}
        )
        analysis = make_analysis(data)

        routes = json.dumps(to_jsonable(analysis.route_plans))
        assert "Part 36" not in routes
        assert CIVIL_REDACTION in routes
        items = [i.item for i in analysis.route_plans[RouteType.FIGHT_CHARGE].evidence_impact]
        assert f"CCTV CCTV per {CIVIL_REDACTION} offer" in items

        assert analysis.filtered_terms == ("Part 36",)
        assert analysis.banner.title == "Civil terms filtered"
        envelope = build_envelope(analysis)
        assert envelope["banner"]["severity"] == "warning"
        assert "Part 36" not in json.dumps(envelope["data"]["routes"])

    def test_clean_case_filters_nothing(self):
        analysis = make_analysis()
        assert analysis.filtered_terms == ()
        assert analysis.banner is None

    def test_pipeline_is_deterministic(self):
        first = build_envelope(make_analysis())
        second = build_envelope(make_analysis())
        first["data"].pop("created_at")
        second["data"].pop("created_at")
        assert first == second

    def test_unknown_stance_is_rejected(self):
        data = dict(SAMPLE_CASE, interview_stance="shrugged")
        with pytest.raises(CaseInputError) as exc_info:
            parse_case(data)
        assert exc_info.value.source == "interview_stance"

    def test_validation_error_names_field(self):
        with pytest.raises(CaseInputError) as exc_info:
            parse_case({"practice_area": "tax"}, "upload.json")
        assert exc_info.value.reason.startswith("practice_area:")
        assert exc_info.value.source == "upload.json"

    def test_non_object_is_rejected(self):
        with pytest.raises(CaseInputError):
            parse_case(["not", "a", "case"])


class TestEnvelope:
    """Test the response envelope."""

    def test_ready_case_has_no_diagnostics(self):
        envelope = build_envelope(make_analysis())
        assert envelope["ok"] is True
        assert "diagnostics" not in envelope
        assert "banner" not in envelope

    def test_thin_case_carries_diagnostics(self):
        envelope = build_envelope(make_analysis({"practice_area": "criminal"}))
        assert envelope["diagnostics"]["reason_codes"] == ["DOCS_NONE"]
        assert envelope["data"]["graph"]["readiness"]["can_commit_strategy"] is False

    def test_error_envelope(self):
        assert error_envelope("bad", "file.json") == {
            "ok": False, "error": "bad", "source": "file.json",
        }
        assert error_envelope("bad") == {"ok": False, "error": "bad"}


# =============================================================================
# CLI TESTS
# =============================================================================

class TestCLI:
    """Test CLI commands."""

    def test_parser_has_commands(self):
        parser = create_parser()
        args = parser.parse_args(["routes", "case.json", "--route", "fight_charge"])
        assert args.command == "routes"
        assert args.route == "fight_charge"
        assert args.today is None

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage: casereason" in capsys.readouterr().out

    def test_status_badges(self):
        assert format_status_badge(PillarStatus.UNSAFE).strip() == "[UNSAFE]"

    def test_demo_summary(self, capsys):
        assert main(["demo", "--today", TODAY]) == 0
        out = capsys.readouterr().out
        assert "Practice area: criminal" in out
        assert "Case: T20240117" in out
        assert "Can commit strategy: yes" in out
        assert "[Intent Downgrade]" in out

    def test_demo_json(self, capsys):
        assert main(["demo", "--json", "--today", TODAY]) == 0
        envelope = json.loads(capsys.readouterr().out)
        assert envelope["ok"] is True
        assert envelope["data"]["reference_date"] == TODAY
        assert set(envelope["data"]["routes"]) == {route.value for route in RouteType}

    def test_pillars_json(self, capsys, case_file):
        path = case_file(HOUSING_CASE)
        assert main(["pillars", path, "--json", "--today", "2024-02-01"]) == 0
        envelope = json.loads(capsys.readouterr().out)
        data = envelope["data"]
        assert data["practice_area"] == "housing_disrepair"
        assert data["pillars"]["compliance_enforcement"]["status"] == "UNSAFE"
        assert data["deadline_checks"]["awaabs_law"]["status"] == "UNSAFE"
        assert "diagnostics" in envelope

    def test_routes_for_civil_case(self, capsys, case_file):
        path = case_file(HOUSING_CASE)
        assert main(["routes", path]) == 0
        assert "only produced for criminal cases" in capsys.readouterr().out

    def test_single_route_json(self, capsys, case_file):
        path = case_file(SAMPLE_CASE)
        assert main(["routes", path, "--json", "--route", "charge_reduction"]) == 0
        routes = json.loads(capsys.readouterr().out)["data"]["routes"]
        assert list(routes) == ["charge_reduction"]
        assert routes["charge_reduction"]["viability"]["status"] == "VIABLE"

    def test_strategies_for_thin_case(self, capsys, case_file):
        path = case_file({"practice_area": "criminal", "charge": {"offence": "s20 OAPA 1861"}})
        assert main(["strategies", path, "--today", TODAY]) == 0
        out = capsys.readouterr().out
        assert "Strategies are provisional:" in out
        assert "No extractable text from documents" in out

    def test_missing_file(self, capsys, tmp_path):
        assert main(["analyse", str(tmp_path / "absent.json")]) == 1
        assert "ERROR:" in capsys.readouterr().err

    def test_invalid_json(self, capsys, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        assert main(["analyse", str(path)]) == 1
        assert "invalid JSON" in capsys.readouterr().err

    def test_case_file_is_not_modified(self, case_file):
        path = case_file(SAMPLE_CASE)
        with open(path, encoding="utf-8") as f:
            before = f.read()
        main(["analyse", path, "--json"])
        with open(path, encoding="utf-8") as f:
            assert f.read() == before
