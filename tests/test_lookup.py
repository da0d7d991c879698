import pytest

from insighted.draft import SchoolDraft
from insighted.errors import ReferenceDataError, SchoolNotFound, ValidationError
from insighted.lookup import (
    autofill,
    field_value,
    find_identifier_field,
    find_reference_record,
    truncate_identifier,
)


def test_records_keep_text_and_column_order(records):
    assert len(records) == 3
    assert records[0]["SchoolID"] == "100001.1"
    assert list(records[0])[:3] == ["Region", "Division", "District"]
    assert records[0]["Mother.School.ID"] == ""


def test_find_identifier_field():
    assert find_identifier_field(["Region", "School ID", "School.Name"]) == "School ID"
    assert find_identifier_field(["Region", "Mother.School.ID"]) is None


def test_truncate_identifier():
    assert truncate_identifier(" 100001.1 ") == "100001"
    assert truncate_identifier("100003") == "100003"
    assert truncate_identifier(None) == ""


class TestFindReferenceRecord:
    def test_suffix_variant_matches(self, records):
        school = find_reference_record(records, "SchoolID", "100001")
        assert school is not None
        assert school["School.Name"] == "Laoag Central Elementary School"

    def test_target_is_trimmed(self, records):
        assert find_reference_record(records, "SchoolID", " 100003 ") is not None

    def test_missing_id_is_none(self, records):
        assert find_reference_record(records, "SchoolID", "100002") is None

    def test_no_case_or_punctuation_normalization(self):
        rows = [{"SchoolID": "AB-01"}]
        assert find_reference_record(rows, "SchoolID", "ab01") is None

    def test_first_match_wins(self):
        rows = [
            {"SchoolID": "100001.1", "name": "first"},
            {"SchoolID": "100001.2", "name": "second"},
        ]
        assert find_reference_record(rows, "SchoolID", "100001")["name"] == "first"


class TestFieldValue:
    def test_header_variants(self):
        record = {"School.Name": " Laoag CES ", "school_region": "Region I"}
        assert field_value(record, "schoolname") == "Laoag CES"
        assert field_value(record, "region") == "Region I"

    def test_absent_field_is_empty(self):
        assert field_value({"Region": "Region I"}, "longitude") == ""

    def test_first_qualifying_column_wins(self):
        record = {"Legislative.District": "1st District", "District": "Laoag I"}
        assert field_value(record, "district") == "1st District"


class TestAutofill:
    def test_autofill_resolves_locations(self, records, hierarchy):
        draft, match = autofill(SchoolDraft(school_id="100001"), records, hierarchy)
        assert draft.school_name == "Laoag Central Elementary School"
        assert draft.region == "Region I"
        assert draft.province == "Ilocos Norte"
        assert draft.municipality == "Laoag City"
        assert draft.barangay == "Barangay A"
        assert draft.division == "Laoag City"
        assert draft.district == "Laoag I"
        assert draft.leg_district == "1st District"
        assert draft.latitude == "18.1977"
        assert draft.longitude == "120.5936"
        assert match.barangay_options == ("Barangay A", "Barangay B")

    def test_autofill_keeps_unmatched_raw_values(self, records, hierarchy):
        draft, match = autofill(SchoolDraft(school_id="100003"), records, hierarchy)
        assert draft.province == "Unknown Province"
        assert draft.municipality == "Somewhere"
        assert draft.barangay == "Brgy X"
        assert draft.mother_school_id == "100001"
        assert match.municipality_options == ()

    def test_legislative_fallback(self, hierarchy):
        rows = [{"SchoolID": "200001", "Legislative": "Lone District"}]
        draft, _ = autofill(SchoolDraft(school_id="200001"), rows, hierarchy)
        assert draft.leg_district == "Lone District"

    def test_not_found_leaves_draft_untouched(self, records, hierarchy):
        draft = SchoolDraft(school_id="100002", school_name="Typed by hand")
        with pytest.raises(SchoolNotFound, match="100002"):
            autofill(draft, records, hierarchy)
        assert draft.school_name == "Typed by hand"

    def test_missing_school_id(self, records, hierarchy):
        with pytest.raises(ValidationError):
            autofill(SchoolDraft(school_id="  "), records, hierarchy)

    def test_missing_id_column(self, hierarchy):
        with pytest.raises(ReferenceDataError):
            autofill(SchoolDraft(school_id="100001"), [{"Name": "x"}], hierarchy)
        with pytest.raises(ReferenceDataError):
            autofill(SchoolDraft(school_id="100001"), [], hierarchy)
