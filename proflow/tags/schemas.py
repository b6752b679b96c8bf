"""Pydantic schemas for smart tags."""

from pydantic import BaseModel, ConfigDict, Field


class SmartTag(BaseModel):
    """A label derived from keywords in a task description."""

    label: str
    color: str

    model_config = ConfigDict(frozen=True)


class SmartTagRule(BaseModel):
    """Keyword set mapped to a tag label and display color."""

    keywords: tuple[str, ...]
    label: str
    color: str

    model_config = ConfigDict(frozen=True)


class DetectRequest(BaseModel):
    """Schema for running tag detection on free text."""

    text: str = Field("", max_length=2000)
