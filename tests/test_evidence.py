"""
Tests for evidence records and normalisation.

These tests verify:
1. Free-form evidence types map to the closed type set
2. Disclosure status strings map to the closed state set
3. Evidence records validate their typed fields
"""

import pytest

from casereason.evidence import (
    CaseDocument,
    DisclosureGap,
    DisclosureState,
    EvidenceItem,
    EvidenceSource,
    EvidenceType,
    EvidenceValidationError,
    Severity,
    create_evidence_item,
    create_gap,
    map_disclosure_status,
    map_evidence_type,
)


# =============================================================================
# TYPE NORMALISATION
# =============================================================================

class TestMapEvidenceType:
    """Test evidence type normalisation."""

    @pytest.mark.parametrize("raw, expected", [
        ("CCTV footage from corner shop", EvidenceType.CCTV),
        ("Body worn video", EvidenceType.BWV),
        ("BWV", EvidenceType.BWV),
        ("Witness statement", EvidenceType.WITNESS_STATEMENT),
        ("MG11 officer statement", EvidenceType.POLICE_STATEMENT),
        ("DNA swab", EvidenceType.FORENSIC),
        ("Hospital discharge summary", EvidenceType.MEDICAL),
        ("VIPER parade", EvidenceType.IDENTIFICATION),
        ("Custody interview", EvidenceType.CUSTODY_INTERVIEW),
        ("Paramedic notes", EvidenceType.AMBULANCE),
        ("999 call", EvidenceType.EMERGENCY_CALL),
        ("Photographs of scene", EvidenceType.OTHER),
    ])
    def test_keyword_mapping(self, raw, expected):
        """Each keyword family maps to its type."""
        assert map_evidence_type(raw) is expected

    def test_first_rule_wins(self):
        """CCTV is checked before custody, so custody CCTV is CCTV."""
        assert map_evidence_type("Custody CCTV") is EvidenceType.CCTV

    def test_video_is_not_identification(self):
        """'id' only matches as a whole word."""
        assert map_evidence_type("Doorbell video") is EvidenceType.OTHER

    def test_empty_is_other(self):
        assert map_evidence_type(None) is EvidenceType.OTHER
        assert map_evidence_type("") is EvidenceType.OTHER


class TestMapDisclosureStatus:
    """Test disclosure status normalisation."""

    @pytest.mark.parametrize("raw, expected", [
        ("Disclosed", DisclosureState.DISCLOSED),
        ("Partially disclosed", DisclosureState.PARTIALLY_DISCLOSED),
        ("Partial", DisclosureState.PARTIALLY_DISCLOSED),
        ("Not disclosed", DisclosureState.NOT_DISCLOSED),
        ("Outstanding", DisclosureState.NOT_DISCLOSED),
        ("Missing", DisclosureState.NOT_DISCLOSED),
        ("Awaited", DisclosureState.UNKNOWN),
        (None, DisclosureState.UNKNOWN),
    ])
    def test_status_mapping(self, raw, expected):
        assert map_disclosure_status(raw) is expected


# =============================================================================
# RECORDS
# =============================================================================

class TestEvidenceRecords:
    """Test evidence record construction."""

    def test_create_evidence_item_normalises(self):
        """Factory maps raw strings and strips whitespace."""
        item = create_evidence_item(
            "CCTV", "  Shop camera  ", "Not disclosed",
            EvidenceSource.OPPOSING_REVIEW, notes="  referred to  ",
        )
        assert item.type is EvidenceType.CCTV
        assert item.description == "Shop camera"
        assert item.is_withheld
        assert not item.is_disclosed
        assert item.notes == "referred to"

    def test_item_rejects_untyped_fields(self):
        """Raw strings are not accepted in place of enums."""
        with pytest.raises(EvidenceValidationError):
            EvidenceItem(
                type="CCTV",
                description="x",
                disclosure_status=DisclosureState.DISCLOSED,
                source=EvidenceSource.OTHER,
            )

    def test_item_is_immutable(self):
        item = create_evidence_item("CCTV", "x", "Disclosed", EvidenceSource.OTHER)
        with pytest.raises(AttributeError):
            item.description = "changed"

    def test_display_name(self):
        item = create_evidence_item("BWV", "Officer camera", "Disclosed", EvidenceSource.OTHER)
        assert item.display_name() == "BWV Officer camera"

    def test_create_gap_requests_item(self):
        gap = create_gap("CCTV", "Full CCTV window", Severity.HIGH)
        assert gap.requested_items == ("Full CCTV window",)
        assert gap.severity is Severity.HIGH

    def test_gap_requires_item(self):
        with pytest.raises(EvidenceValidationError):
            DisclosureGap(category="CCTV", item="", severity=Severity.LOW)

    def test_document_text_length(self):
        assert CaseDocument(id="d1", raw_text="  abc  ").text_length == 3
        assert CaseDocument(id="d2").text_length == 0
