"""Rule and stored document models."""
from pydantic import BaseModel, Field, ConfigDict

MAX_FIELDS = 6
FIELD_NAMES = tuple(f"v{i}" for i in range(MAX_FIELDS))
SCHEMA_KEYS = ("ptype",) + FIELD_NAMES


class StoredDocument(BaseModel):
    """Fixed-width storage shape of one policy rule.

    Every field is always present; absence is the empty string.
    """
    model_config = ConfigDict(extra="ignore", strict=True)

    ptype: str = Field(..., min_length=1, description="Rule type tag, e.g. p or g")
    v0: str = ""
    v1: str = ""
    v2: str = ""
    v3: str = ""
    v4: str = ""
    v5: str = ""

    def values(self) -> list[str]:
        """Field values in position order."""
        return [getattr(self, name) for name in FIELD_NAMES]


class PolicyRule(BaseModel):
    """A decoded policy rule."""
    section: str = Field(..., description="Model section the rule belongs to")
    ptype: str = Field(..., description="Rule type tag")
    fields: list[str] = Field(default_factory=list, max_length=MAX_FIELDS)


class PolicyFilter(BaseModel):
    """Equality filter for partial loads.

    Unset attributes are unconstrained; an empty filter matches every rule.
    """
    model_config = ConfigDict(extra="forbid")

    ptype: str | None = None
    v0: str | None = None
    v1: str | None = None
    v2: str | None = None
    v3: str | None = None
    v4: str | None = None
    v5: str | None = None

    def to_selector(self) -> dict[str, str]:
        return self.model_dump(exclude_none=True)
