from __future__ import annotations

import logging

from src.turnin.fields import FieldKind
from src.turnin.normalizer import (
    OpaqueObject,
    PersonName,
    PostalAddress,
    Scalar,
    decode_value,
    normalize,
    strip_index_prefix,
)

from .builders import jotform_fields


def test_name_object_joins_first_and_last():
    record = normalize({"Homeowner Name": {"first": "Jane", "last": "Doe"}})
    assert record.fields["Homeowner Name"] == "Jane Doe"
    assert record.fields["Homeowner First Name"] == "Jane"
    assert record.fields["Homeowner Last Name"] == "Doe"


def test_name_object_trims_parts():
    record = normalize({"homeownerName": {"first": "  Jane ", "last": ""}})
    assert record.fields["Homeowner Name"] == "Jane"
    assert record.fields["Homeowner First Name"] == "Jane"
    assert record.fields["Homeowner Last Name"] == ""


def test_address_with_city_and_state_only():
    record = normalize({"Project Address": {"city": "Austin", "state": "TX"}})
    assert record.fields["Project Address"] == "Austin, TX"


def test_address_keeps_fixed_part_order_and_skips_blanks():
    address = {
        "postal": "80202",
        "state": "CO",
        "city": "Denver",
        "addr_line2": "  ",
        "addr_line1": "12 Elm St",
    }
    record = normalize({"projectAddress": address})
    assert record.fields["Project Address"] == "12 Elm St, Denver, CO, 80202"


def test_blank_candidates_fall_through():
    record = normalize({"Homeowner Name": "", "homeownerName": None, "homeowner": "Sam"})
    assert record.fields["Homeowner Name"] == "Sam"
    assert record.sources["Homeowner Name"] == "homeowner"


def test_empty_name_object_still_wins_over_later_candidates():
    record = normalize({"Homeowner Name": {"first": "", "last": ""}, "homeowner": "Sam"})
    assert record.fields["Homeowner Name"] == ""
    assert record.fields["Homeowner First Name"] == ""
    assert record.fields["Homeowner Last Name"] == ""
    assert record.sources["Homeowner Name"] == "Homeowner Name"


def test_index_prefixed_key_answers_plain_candidate():
    record = normalize({"q9_homeownerName": "Alex", "homeowner": "Other"})
    assert record.fields["Homeowner Name"] == "Alex"
    assert record.sources["Homeowner Name"] == "q9_homeownerName"


def test_lowest_index_wins_between_prefixed_duplicates():
    record = normalize({"q12_email": "late@example.com", "q3_email": "early@example.com"})
    assert record.fields["Homeowner Email"] == "early@example.com"
    assert record.extras["email"] == "early@example.com"


def test_unrecognized_object_without_identity_resolves_empty(caplog):
    caplog.set_level(logging.WARNING, logger="src.turnin.normalizer")
    record = normalize({"Homeowner Phone Number": {"area": "555"}, "phone": "555-0100"})
    assert record.fields["Homeowner Phone Number"] == ""
    assert record.sources["Homeowner Phone Number"] == "Homeowner Phone Number"
    assert record.unrecognized == ["Homeowner Phone Number"]
    assert "Unrecognized object shape" in caplog.text


def test_unrecognized_object_uses_identity_value():
    record = normalize({"Status": {"value": "Complete"}})
    assert record.fields["Status"] == "Complete"
    assert record.unrecognized == ["Status"]


def test_flags_are_coerced_to_booleans():
    record = normalize(
        {
            "Structures to be worked on >> House >> Roof": "Yes",
            "shedPaint": "No",
            "garageWindows": True,
            "houseGutters": ["Gutters"],
        }
    )
    assert record.fields["House Roof"] is True
    assert record.fields["Shed Paint"] is False
    assert record.fields["Garage Windows"] is True
    assert record.fields["House Gutters"] is True
    assert record.fields["Garage Roof"] is False


def test_list_values_are_joined():
    record = normalize({"roofMaterials": ["Shingles", "", "Felt"]})
    assert record.fields["Roof Materials to Replace"] == "Shingles, Felt"


def test_passthrough_lives_in_separate_namespace():
    record = normalize({"Status": "", "status": "Open", "q40_extraNotes": "bring ladder"})
    assert record.fields["Status"] == "Open"
    assert record.extras["Status"] == ""
    assert record["Status"] == "Open"
    assert record.extras["q40_extraNotes"] == "bring ladder"
    assert record.extras["extraNotes"] == "bring ladder"
    assert record.get("extraNotes") == "bring ladder"
    assert "extraNotes" in record
    assert record.get("missing", "n/a") == "n/a"


def test_as_dict_prefers_canonical_values():
    record = normalize({"Homeowner Name": "", "homeowner": "Sam", "custom": 1})
    merged = record.as_dict()
    assert merged["Homeowner Name"] == "Sam"
    assert merged["custom"] == 1


def test_non_mapping_input_degrades_to_defaults():
    for raw in (None, "garbage", ["a", "b"], 42):
        record = normalize(raw)  # type: ignore[arg-type]
        assert record.fields["Homeowner Name"] == "Homeowner"
        assert record.extras == {}


def test_full_jotform_submission():
    record = normalize(jotform_fields())
    fields = record.fields
    assert fields["Project Manager"] == "Pat Manager"
    assert fields["Project Manager First Name"] == "Pat"
    assert fields["PM Email"] == "pat@gatesroof.com"
    assert fields["Homeowner Name"] == "Jane Doe"
    assert fields["Homeowner Phone Number"] == "(555) 010-2000"
    assert fields["Homeowner Email"] == "jane@example.com"
    assert fields["Project Address"] == "12 Elm St, Denver, CO, 80202"
    assert fields["Brand of Shingle"] == "Owens Corning"
    assert fields["Shingle Color"] == "Onyx Black"
    assert fields["Type of Shingle"] == ""
    assert fields["House Roof"] is True
    assert fields["Garage Gutters"] is True
    assert fields["Shed Roof"] is False
    assert fields["Special Instructions"] == "Call before arrival"
    assert fields["Status"] == "Ready"
    assert record.sources["Homeowner Name"] == "q3_homeownerName"
    assert record.unrecognized == []


def test_decode_value_variants():
    assert decode_value({"first": "A", "last": "B"}) == PersonName(first="A", last="B")
    assert decode_value({"city": "Reno"}) == PostalAddress(parts=("Reno",))
    assert decode_value({"shape": "odd"}) == OpaqueObject(identity="")
    assert decode_value("plain") == Scalar("plain")
    assert decode_value(["x", "y"]) == Scalar("x, y")


def test_decode_value_prefers_address_for_address_fields():
    mixed = {"first": "A", "city": "Reno"}
    assert isinstance(decode_value(mixed), PersonName)
    assert isinstance(decode_value(mixed, FieldKind.ADDRESS), PostalAddress)


def test_strip_index_prefix():
    assert strip_index_prefix("q135_projectManager") == "projectManager"
    assert strip_index_prefix("12_status") == "status"
    assert strip_index_prefix("Homeowner Name") is None
    assert strip_index_prefix("homeowner_name") is None
