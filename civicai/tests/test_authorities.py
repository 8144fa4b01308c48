"""
Tests for the authority registry and report → draft building
"""
import pytest

from civicai.config import Settings
from civicai.models.ticket import Authority, AuthorityCategory, Severity
from civicai.services.authorities import AUTHORITIES, AuthorityRegistry
from civicai.services.report_builder import build_ticket_draft


class TestAuthorityRegistry:
    """Category → authority resolution"""

    @pytest.mark.parametrize("category,expected", [
        (AuthorityCategory.CORPORATION, "auth_muni"),
        (AuthorityCategory.WATER_BOARD, "auth_water"),
        (AuthorityCategory.ELECTRICITY_BOARD, "auth_elec"),
        (AuthorityCategory.TRAFFIC_POLICE, "auth_police"),
    ])
    def test_resolve_by_category(self, registry, category, expected):
        assert registry.resolve(category).id == expected

    def test_resolve_raw_label(self, registry):
        assert registry.resolve("Water Board").id == "auth_water"

    def test_unknown_label_uses_default(self, registry):
        assert registry.resolve("Fire Department").id == "auth_muni"
        assert registry.resolve(None).id == "auth_muni"

    def test_configured_default(self):
        registry = AuthorityRegistry(settings=Settings(default_authority_id="auth_elec"))

        assert registry.default.id == "auth_elec"
        assert registry.default_category == AuthorityCategory.ELECTRICITY_BOARD
        assert registry.resolve("Parks").id == "auth_elec"

    def test_missing_default_falls_back_to_first(self):
        registry = AuthorityRegistry(settings=Settings(default_authority_id="auth_nope"))
        assert registry.default.id == AUTHORITIES[0].id

    def test_only_category_match_when_registry_has_no_police(self, settings):
        authorities = [a for a in AUTHORITIES if a.category != AuthorityCategory.TRAFFIC_POLICE]
        registry = AuthorityRegistry(authorities, settings=settings)

        assert registry.resolve(AuthorityCategory.TRAFFIC_POLICE).id == "auth_muni"

    def test_empty_registry_rejected(self, settings):
        with pytest.raises(ValueError):
            AuthorityRegistry([], settings=settings)

    def test_get_by_id(self, registry):
        assert registry.get("auth_water").name == "Metro Water Supply Board"
        assert registry.get("missing") is None

    def test_invalid_whatsapp_rejected(self):
        with pytest.raises(ValueError):
            Authority(
                id="x",
                name="X",
                category=AuthorityCategory.CORPORATION,
                email="x@example.org",
                whatsapp="+1 555",
            )


class TestBuildTicketDraft:
    """Report → TicketDraft"""

    def test_routes_and_copies_analysis(self, sample_report, registry):
        draft = build_ticket_draft(sample_report, registry, image_url="blob:1")

        assert draft.title == sample_report.detection.title
        assert draft.authority_id == "auth_muni"
        assert draft.severity == Severity.HIGH
        assert draft.image_url == "blob:1"
        assert draft.address == sample_report.address
        assert draft.drafts == sample_report.drafts
        assert draft.ai_analysis.confidence == pytest.approx(0.92)
        assert draft.ai_analysis.detected_objects == ["pothole", "road"]

    def test_severity_override_preserves_detected(self, sample_report, registry):
        draft = build_ticket_draft(sample_report, registry, severity_override=Severity.EMERGENCY)

        assert draft.severity == Severity.EMERGENCY
        assert draft.ai_analysis.detected_severity == Severity.HIGH

    def test_water_board_routing(self, sample_report, registry):
        detection = sample_report.detection.model_copy(update={"authority_type": AuthorityCategory.WATER_BOARD})
        report = sample_report.model_copy(update={"detection": detection})

        assert build_ticket_draft(report, registry).authority_id == "auth_water"
