"""Preference updates and display composition.

The surname is only used to compose display names; filtering depends
on the category alone.
"""

from __future__ import annotations

from collections.abc import Iterable

from mimimatch.schemas import Category, PreferenceConfig


def set_category(config: PreferenceConfig, category: Category) -> PreferenceConfig:
    """Return new config with the category filter replaced."""
    return config.model_copy(update={"category": category})


def set_label(config: PreferenceConfig, text: str) -> PreferenceConfig:
    """Return new config with the surname replaced (free-form, may be empty)."""
    return config.model_copy(update={"surname": text})


def title_case(text: str) -> str:
    """Upper-case the first character and lower-case the rest."""
    return text[:1].upper() + text[1:].lower() if text else ""


def display_name(name: str, surname: str) -> str:
    """Compose the full name shown on a card, e.g. 'Eva Nováková'."""
    parts = [title_case(name), title_case(surname)]
    return " ".join(p for p in parts if p)


def shortlist_name(name: str, surname: str) -> str:
    """Compose a shortlist entry: the name as stored, the surname title-cased."""
    parts = [name, title_case(surname)]
    return " ".join(p for p in parts if p)


def shortlist_text(kept: Iterable[str], surname: str) -> str:
    """Build the plain-text shortlist used for sharing, one name per line."""
    return "\n".join(shortlist_name(name, surname) for name in kept)
