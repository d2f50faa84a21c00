"""Access to the enforcement engine's policy model.

The model is either a plain mapping of section -> type tag -> list of rules,
or a Casbin-style model object exposing the same structure through
``model.model[section][ptype].policy``.
"""
from typing import Any, Iterator

PolicyModel = dict[str, dict[str, list[list[str]]]]

# Sections written by a full save
SAVED_SECTIONS = ("p", "g")


def _sections(model: Any):
    return getattr(model, "model", model)


def _rules(entry: Any) -> list[list[str]]:
    return getattr(entry, "policy", entry)


def append_rule(model: Any, section: str, ptype: str, fields: list[str]) -> None:
    """Append one rule, creating missing section and type entries on a plain mapping."""
    sections = _sections(model)
    if hasattr(model, "model"):
        _rules(sections[section][ptype]).append(fields)
        return
    sections.setdefault(section, {}).setdefault(ptype, []).append(fields)


def iter_rules(model: Any, sections: tuple[str, ...] = SAVED_SECTIONS) -> Iterator[tuple[str, list[str]]]:
    """Yield (ptype, fields) for every rule in the given sections."""
    all_sections = _sections(model)
    for section in sections:
        for ptype, entry in all_sections.get(section, {}).items():
            for fields in _rules(entry):
                yield ptype, list(fields)
