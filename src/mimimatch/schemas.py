"""Pydantic schemas for mimimatch.

Defines the core data models: Category, CandidateRecord and
PreferenceConfig. All models use frozen=True for immutability.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class Category(StrEnum):
    """Category tag of a candidate name (and the preference filter).

    Values are the persisted form and must not change.
    """

    BOY = "MUZ"
    GIRL = "ZENA"
    NEUTRAL = "NEUTRALNI"


class CandidateRecord(BaseModel):
    """A single name from the dataset. Immutable."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    category: Category = Field(alias="gender")
    name: str = Field(min_length=1)
    fact: str | None = Field(default=None)

    @property
    def key(self) -> str:
        """Natural unique identifier of the record."""
        return self.name


class PreferenceConfig(BaseModel):
    """User preferences: surname used for display and the category filter."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    surname: str = ""
    category: Category = Field(default=Category.GIRL, alias="gender")
