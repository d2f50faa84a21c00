"""Conversion between policy tuples and stored documents."""
from typing import Any, Mapping, Sequence
import structlog
from pydantic import ValidationError
from .models import FIELD_NAMES, MAX_FIELDS, PolicyRule, StoredDocument
from ..errors import DecodeError, EncodeError

log = structlog.get_logger()


def section_of(ptype: str) -> str:
    """Section a rule type belongs to: the first character of its tag."""
    return ptype[:1]


def encode(ptype: str, fields: Sequence[str]) -> StoredDocument:
    """
    Encode a rule into its fixed-width document.

    Args:
        ptype: Rule type tag
        fields: Rule field values, at most six

    Returns:
        Document with unused positions set to the empty string

    Raises:
        EncodeError: If the tag is empty or there are too many fields
    """
    if not ptype:
        raise EncodeError("rule type tag must not be empty")
    if len(fields) > MAX_FIELDS:
        raise EncodeError(
            f"rule of type {ptype!r} has {len(fields)} fields, at most {MAX_FIELDS} can be stored"
        )

    values = {name: "" for name in FIELD_NAMES}
    for name, value in zip(FIELD_NAMES, fields):
        values[name] = value
    try:
        return StoredDocument(ptype=ptype, **values)
    except ValidationError as e:
        raise EncodeError(f"invalid rule of type {ptype!r}: {e}") from e


def decode_fields(document: StoredDocument) -> list[str]:
    """Field list of a document, ending at the first empty value."""
    fields = []
    for value in document.values():
        if value == "":
            break
        fields.append(value)
    return fields


def decode(raw: Mapping[str, Any] | StoredDocument) -> PolicyRule:
    """
    Decode a stored document into a rule.

    Values after the first empty field are dropped. A document with an
    empty v0 decodes to a rule with no fields.

    Raises:
        DecodeError: If the document has no type tag or a non-string value
    """
    if isinstance(raw, StoredDocument):
        document = raw
    else:
        try:
            document = StoredDocument.model_validate(dict(raw))
        except (TypeError, ValueError) as e:
            log.error("rule.decode_failed", error=str(e))
            raise DecodeError(f"malformed policy document: {e}") from e

    return PolicyRule(
        section=section_of(document.ptype),
        ptype=document.ptype,
        fields=decode_fields(document),
    )
