"""Tests for rule encoding and decoding."""
import pytest
from policy_adapter.errors import DecodeError, EncodeError
from policy_adapter.rules.codec import decode, encode, section_of
from policy_adapter.rules.models import StoredDocument


def test_encode_pads_unused_fields():
    """Test unused positions are stored as empty strings."""
    doc = encode("p", ["alice", "data1", "read"])

    assert doc.model_dump() == {
        "ptype": "p",
        "v0": "alice",
        "v1": "data1",
        "v2": "read",
        "v3": "",
        "v4": "",
        "v5": "",
    }


@pytest.mark.parametrize("fields", [
    [],
    ["alice"],
    ["alice", "admin"],
    ["alice", "data1", "read"],
    ["a", "b", "c", "d", "e", "f"],
])
def test_round_trip(fields):
    """Test decode(encode(...)) restores the rule for every arity."""
    rule = decode(encode("p2", fields))

    assert rule.section == "p"
    assert rule.ptype == "p2"
    assert rule.fields == fields


def test_decode_stops_at_first_empty_field():
    """Test values after a gap are dropped."""
    rule = decode({"ptype": "p", "v0": "a", "v1": "", "v2": "b"})

    assert rule.fields == ["a"]


def test_decode_empty_v0_keeps_zero_arity_rule():
    """Test an all-empty document still yields a rule."""
    rule = decode({"ptype": "g", "v0": "", "v1": "ignored"})

    assert rule.section == "g"
    assert rule.fields == []


def test_decode_ignores_storage_keys():
    """Test extra keys such as _id are ignored."""
    rule = decode({"_id": "65f0c0ffee", "ptype": "g", "v0": "alice", "v1": "admin"})

    assert rule.fields == ["alice", "admin"]


def test_decode_missing_fields_read_as_empty():
    """Test a document written without v2..v5 decodes normally."""
    rule = decode({"ptype": "p", "v0": "bob", "v1": "data2"})

    assert rule.fields == ["bob", "data2"]


def test_decode_accepts_stored_document():
    """Test decode accepts an already validated document."""
    doc = StoredDocument(ptype="p", v0="x")

    assert decode(doc).fields == ["x"]


@pytest.mark.parametrize("raw", [
    {"v0": "alice"},
    {"ptype": "", "v0": "alice"},
    {"ptype": "p", "v0": 42},
    {"ptype": None},
])
def test_decode_malformed_document_raises(raw):
    """Test malformed documents raise DecodeError."""
    with pytest.raises(DecodeError):
        decode(raw)


def test_encode_rejects_too_many_fields():
    """Test rules wider than the schema are rejected."""
    with pytest.raises(EncodeError):
        encode("p", ["1", "2", "3", "4", "5", "6", "7"])


def test_encode_rejects_empty_type():
    """Test the type tag is required."""
    with pytest.raises(EncodeError):
        encode("", ["alice"])


def test_section_of():
    """Test the section is the first character of the type tag."""
    assert section_of("p") == "p"
    assert section_of("g2") == "g"
