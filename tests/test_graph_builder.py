"""
Tests for the Evidence Graph Builder.

These tests verify:
1. Review and bundle documents merge into one graph
2. Outstanding material becomes typed disclosure gaps
3. Court contradictions across documents are detected
4. Missing or thin input yields a typed graph, never an error
"""

from casereason.cli.pipeline import SAMPLE_BUNDLE_TEXT, SAMPLE_REVIEW_TEXT
from casereason.evidence import (
    CaseDocument,
    DisclosureState,
    EvidenceSource,
    EvidenceType,
    GapSource,
    Severity,
)
from casereason.graph.builder import (
    COURT_MISMATCH_NOTE,
    build_evidence_graph,
    extract_court_from_text,
    normalise_court,
)


def make_review_doc():
    return CaseDocument(id="review", name="Defence review.pdf", raw_text=SAMPLE_REVIEW_TEXT)


def make_bundle_doc(raw_text=SAMPLE_BUNDLE_TEXT, evidence=None):
    extracted = None
    if evidence is not None:
        extracted = {"criminalMeta": {"prosecutionEvidence": evidence}}
    return CaseDocument(id="bundle", name="Bundle.pdf", raw_text=raw_text, extracted_json=extracted)


# =============================================================================
# GRAPH CONTENT
# =============================================================================

class TestGraphFromReview:
    """Test graphs built from a case review."""

    def test_review_items_and_gaps(self):
        graph = build_evidence_graph([make_review_doc()])

        assert len(graph.evidence_items) == 5
        assert all(i.source is EvidenceSource.OPPOSING_REVIEW for i in graph.evidence_items)
        assert len(graph.disclosure_gaps) == 5

    def test_gap_categories_and_severity(self):
        graph = build_evidence_graph([make_review_doc()])
        by_category = {}
        for gap in graph.disclosure_gaps:
            by_category.setdefault(gap.category, []).append(gap)

        assert len(by_category["CCTV"]) == 3
        assert all(g.severity is Severity.HIGH for g in by_category["CCTV"])
        assert len(by_category["Disclosure"]) == 2
        assert all(g.severity is Severity.MEDIUM for g in by_category["Disclosure"])
        assert all(g.source is GapSource.OPPOSING_REVIEW for g in graph.disclosure_gaps)

    def test_case_meta_comes_from_review(self):
        graph = build_evidence_graph([make_review_doc()])
        assert graph.case_meta.case_ref == "T20240117"
        assert graph.case_meta.court == "Snaresbrook Crown Court"

    def test_ready_with_gap_note(self):
        """Enough text commits strategy; gaps add a non-blocking note."""
        graph = build_evidence_graph([make_review_doc()])
        assert graph.readiness.can_commit_strategy
        assert graph.readiness.reasons == (
            "5 disclosure gap(s) identified - strategy should be disclosure-first",
        )

    def test_withheld_items_are_missing(self):
        graph = build_evidence_graph([make_review_doc()])
        missing = graph.missing_item_names()
        assert "BWV Arresting officer camera" in missing
        assert missing[0] == "Full unedited CCTV window 22:00 to 22:30"

    def test_gaps_at_least(self):
        graph = build_evidence_graph([make_review_doc()])
        assert len(graph.gaps_at_least(Severity.HIGH)) == 3
        assert len(graph.gaps_at_least(Severity.LOW)) == 5


class TestGraphFromBundle:
    """Test graphs built from structured bundle extraction."""

    def test_bundle_items_default_to_disclosed(self):
        doc = make_bundle_doc(evidence=[
            {"type": "Witness statement", "content": "Statement of complainant"},
            {"type": "CCTV", "content": "Shop extract", "status": "Partially disclosed",
             "issues": ["Extract only", "No continuity"]},
        ])
        graph = build_evidence_graph([doc])

        assert len(graph.evidence_items) == 2
        witness, cctv = graph.evidence_items
        assert witness.type is EvidenceType.WITNESS_STATEMENT
        assert witness.disclosure_status is DisclosureState.DISCLOSED
        assert witness.source is EvidenceSource.PRIMARY_BUNDLE
        assert cctv.disclosure_status is DisclosureState.PARTIALLY_DISCLOSED
        assert cctv.notes == "Extract only, No continuity"

    def test_malformed_extraction_is_ignored(self):
        doc = CaseDocument(id="x", raw_text="text", extracted_json={"criminalMeta": "nope"})
        graph = build_evidence_graph([doc])
        assert graph.evidence_items == ()

    def test_merge_review_and_bundle(self):
        graph = build_evidence_graph([
            make_review_doc(),
            make_bundle_doc(evidence=[{"type": "Medical", "content": "Discharge summary"}]),
        ])
        assert len(graph.evidence_items) == 6
        assert graph.contradictions == ()


# =============================================================================
# CONTRADICTIONS
# =============================================================================

class TestContradictions:
    """Test cross-document court contradiction detection."""

    def test_court_mismatch(self):
        bundle = make_bundle_doc(raw_text="Case sent to Wood Green Crown Court for trial.")
        graph = build_evidence_graph([make_review_doc(), bundle])

        assert len(graph.contradictions) == 1
        contradiction = graph.contradictions[0]
        assert contradiction.field == "court"
        assert contradiction.value_a == "Wood Green Crown Court"
        assert contradiction.value_b == "Snaresbrook Crown Court"
        assert contradiction.severity is Severity.HIGH
        assert contradiction.notes == COURT_MISMATCH_NOTE

    def test_same_court_differently_written(self):
        bundle = make_bundle_doc(raw_text="Listed before Snaresbrook  Crown Court tomorrow.")
        graph = build_evidence_graph([make_review_doc(), bundle])
        assert graph.contradictions == ()

    def test_no_review_no_contradictions(self):
        bundle = make_bundle_doc(raw_text="Listed at Leeds Magistrates' Court.")
        assert build_evidence_graph([bundle]).contradictions == ()

    def test_extract_court(self):
        assert extract_court_from_text(
            "Listed at Leeds Magistrates' Court on 3 May"
        ) == "Leeds Magistrates' Court"
        assert extract_court_from_text("the court adjourned") is None

    def test_normalise_court(self):
        assert normalise_court("At the Leeds  Magistrates' Court") == "leeds magistrates court"
        assert normalise_court(None) is None


# =============================================================================
# THIN AND EMPTY INPUT
# =============================================================================

class TestThinInput:
    """Test readiness thresholds and empty input."""

    def test_no_documents(self):
        graph = build_evidence_graph([])
        assert graph.evidence_items == ()
        assert not graph.readiness.can_commit_strategy
        assert graph.readiness.reasons == ("No extractable text from documents",)

    def test_799_chars_is_thin(self):
        graph = build_evidence_graph([CaseDocument(id="d", raw_text="x" * 799)])
        assert not graph.readiness.can_commit_strategy
        assert graph.readiness.reasons[0].startswith("Insufficient text")

    def test_801_chars_is_ready(self):
        graph = build_evidence_graph([CaseDocument(id="d", raw_text="x" * 801)])
        assert graph.readiness.can_commit_strategy
        assert graph.readiness.reasons == ()

    def test_threshold_is_configurable(self):
        graph = build_evidence_graph(
            [CaseDocument(id="d", raw_text="x" * 801)], min_text_chars=1000
        )
        assert not graph.readiness.can_commit_strategy

    def test_graph_is_deterministic(self):
        docs = [make_review_doc(), make_bundle_doc()]
        assert build_evidence_graph(docs) == build_evidence_graph(docs)
