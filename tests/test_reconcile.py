"""Tests for identity reconciliation and aspect/certificate mapping."""

import pytest

from cardsnipe.core.types import CardIdentity, CertificateRecord, Confidence, GradeAuthority, GradeInfo
from cardsnipe.parse.title import parse_title
from cardsnipe.reconcile import (
    IdentitySignals,
    certificate_number_from_aspects,
    explain,
    grade_from_aspects,
    grade_from_certificate_record,
    identity_from_aspects,
    identity_from_certificate,
    reconcile,
    reconcile_grade,
)

ASPECTS = {
    "Year Manufactured": "2019",
    "Set": "2019-20 Panini Hoops Premium Stock",
    "Card Number": "087",
    "Parallel/Variety": "Purple Pulsar",
    "Player/Athlete": "LeBron James",
    "Autographed": "No",
    "Professional Grader": "Professional Sports Authenticator (PSA)",
    "Grade": "10",
    "Certification Number": "4567-8901",
    "Material": "Card Stock",
}

CERT = CertificateRecord(
    cert_number="45678901",
    year=2019,
    set_name="PANINI HOOPS PREMIUM STOCK",
    player="LEBRON JAMES",
    card_number="87",
    numeric_grade=10.0,
    variety="PURPLE PULSAR",
    parallel="PURPLE PULSAR",
    grade_description="GEM MT 10",
)


class TestAspects:
    """Test seller aspect mapping."""

    def test_identity_from_aspects(self, catalog):
        identity = identity_from_aspects(ASPECTS, catalog)

        assert identity.year == 2019
        assert identity.set_name == "hoops premium stock"
        assert identity.card_number == "87"
        assert identity.parallel == "purple pulsar"
        assert identity.is_autograph is False
        assert identity.sport == "basketball"

    def test_placeholders_ignored(self, catalog):
        identity = identity_from_aspects({"Parallel/Variety": "N/A", "Set": "  ", "Insert Set": "Base"}, catalog)

        assert identity == CardIdentity(is_autograph=None)

    def test_non_variant_parallel_dropped(self, catalog):
        assert identity_from_aspects({"Parallel/Variety": "Rookie"}, catalog).parallel is None

    def test_unknown_set_has_brand_stripped(self, catalog):
        assert identity_from_aspects({"Set": "2020 Panini Contenders"}, catalog).set_name == "contenders"

    def test_grade_from_aspects(self):
        grade = grade_from_aspects(ASPECTS)

        assert grade == GradeInfo(authority=GradeAuthority.PSA, numeric_grade=10.0)
        assert grade_from_aspects({"Grade": "10"}) is None

    def test_certificate_number_digits_only(self):
        assert certificate_number_from_aspects(ASPECTS) == "45678901"
        assert certificate_number_from_aspects({}) is None


class TestCertificateIdentity:
    """Test certificate record mapping."""

    def test_identity_from_certificate(self, catalog, purple_pulsar_identity):
        identity = identity_from_certificate(CERT, catalog)

        assert identity.set_name == "hoops premium stock"
        assert identity.parallel == "purple pulsar"
        assert identity.player == "Lebron James"
        assert identity.sport == "basketball"
        assert identity.is_autograph is None

    def test_rookie_variety_is_not_parallel(self, catalog):
        record = CertificateRecord(cert_number="1", set_name="PANINI PRIZM", variety="ROOKIE")
        assert identity_from_certificate(record, catalog).parallel is None

    def test_insert_variety(self, catalog):
        record = CertificateRecord(cert_number="1", set_name="NBA HOOPS", variety="SPLASH")
        identity = identity_from_certificate(record, catalog)

        assert identity.insert_line == "splash"
        assert identity.parallel is None

    def test_autograph_asserted_from_variety(self, catalog):
        record = CertificateRecord(cert_number="1", set_name="PANINI PRIZM", variety="SILVER PRIZM AUTO")
        assert identity_from_certificate(record, catalog).is_autograph is True

    def test_no_record(self, catalog):
        assert identity_from_certificate(None, catalog) == CardIdentity()
        assert grade_from_certificate_record(None) is None

    def test_grade_from_certificate_record(self):
        grade = grade_from_certificate_record(CERT)
        assert grade.numeric_grade == 10.0
        assert grade.is_gem


class TestReconcile:
    """Test per-field priority merge."""

    def test_certificate_parallel_beats_title(self, catalog):
        title = parse_title("2019 Panini Hoops Premium Stock LeBron James Purple #87 PSA 10", catalog)
        signals = IdentitySignals(title_parse=title, certificate_lookup=identity_from_certificate(CERT, catalog))

        identity, confidence = reconcile(signals)

        assert title.parallel == "purple"
        assert identity.parallel == "purple pulsar"
        assert confidence is Confidence.VERY_HIGH

    def test_aspects_beat_title(self):
        signals = IdentitySignals(
            title_parse=CardIdentity(year=2019, set_name="hoops", card_number="87", parallel="purple"),
            seller_aspects=CardIdentity(parallel="purple pulsar", set_name="hoops premium stock"),
        )

        result = explain(signals)

        assert result.identity.parallel == "purple pulsar"
        assert result.identity.card_number == "87"
        assert result.provenance["parallel"] == "seller_aspects"
        assert result.provenance["card_number"] == "title"
        assert result.confidence is Confidence.HIGH

    def test_ocr_fills_gaps_only(self):
        signals = IdentitySignals(
            title_parse=CardIdentity(year=2019, is_autograph=False),
            ocr_certificate_lookup=CardIdentity(year=2018, set_name="prizm", card_number="5"),
        )

        identity, _ = reconcile(signals)

        assert identity.year == 2019
        assert identity.set_name == "prizm"

    def test_nothing_known(self):
        identity, confidence = reconcile(IdentitySignals())

        assert identity == CardIdentity()
        assert confidence is Confidence.NONE

    def test_missing_field_stays_absent(self):
        identity, _ = reconcile(IdentitySignals(title_parse=CardIdentity(year=2019)))
        assert identity.card_number is None


class TestReconcileGrade:
    @pytest.mark.parametrize("grades,expected", [
        ((None, None), GradeInfo.raw()),
        ((GradeInfo.raw(), GradeInfo(authority=GradeAuthority.PSA, numeric_grade=9.0)),
         GradeInfo(authority=GradeAuthority.PSA, numeric_grade=9.0)),
        ((GradeInfo(authority=GradeAuthority.BGS, numeric_grade=9.5),
          GradeInfo(authority=GradeAuthority.PSA, numeric_grade=10.0)),
         GradeInfo(authority=GradeAuthority.BGS, numeric_grade=9.5)),
        ((None, GradeInfo(numeric_grade=10.0, is_gem=True)), GradeInfo(numeric_grade=10.0, is_gem=True)),
    ])
    def test_priority(self, grades, expected):
        assert reconcile_grade(*grades) == expected
