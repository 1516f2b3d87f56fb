from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ExperienceLevel = Literal["entry", "junior", "mid", "senior", "executive", "unspecified"]


class JobPosting(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str = ""
    title: str | None = None
    company: str | None = None


class PostingProfile(BaseModel):
    title: str | None = None
    company: str | None = None
    experience_level: ExperienceLevel = "unspecified"
    responsibilities: list[str] = Field(default_factory=list)
