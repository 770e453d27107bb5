from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

AnalysisSource = Literal["model", "repaired", "fallback"]
# Integer scores stay integers so replies round-trip unchanged.
Score = Union[
    Annotated[int, Field(strict=True, ge=0, le=100)],
    Annotated[float, Field(ge=0.0, le=100.0)],
]


class AnalysisResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    score: Score
    skills: list[str] = Field(min_length=1)
    suggestions: list[str] = Field(min_length=1)
    job_suggestions: list[str] = Field(alias="jobSuggestions", min_length=1)
    source: AnalysisSource = "model"

    @field_validator("skills", "suggestions", "job_suggestions")
    @classmethod
    def _no_blank_items(cls, value: list[str]) -> list[str]:
        if any(not item.strip() for item in value):
            raise ValueError("list items must be non-blank strings")
        return value


class UploadRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    original_name: str = Field(alias="originalName")
    size: int = Field(ge=0)
    mime_type: str = Field(alias="mimeType")
    analysis: AnalysisResult | None = None
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")


class UploadResponse(BaseModel):
    ok: bool = True
    doc: UploadRecord


class UploadListResponse(BaseModel):
    items: list[UploadRecord] = Field(default_factory=list)
