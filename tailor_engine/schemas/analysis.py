from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from .posting import PostingProfile
from .resume import ResumeDocument, SectionKind

RequirementCategory = Literal["skill", "experience-level", "certification", "soft-skill", "tool"]
RequirementImportance = Literal["required", "preferred", "default"]
MatchStatus = Literal["matched", "partial", "unmatched"]
MatchType = Literal["exact", "synonym", "fuzzy", "near-miss", "none"]
SuggestionKind = Literal["rewrite", "add-bullet", "add-skill", "acknowledge-gap"]
EvidenceSection = Literal[
    "summary",
    "experience_title",
    "experience_bullet",
    "education",
    "skills",
    "project",
    "project_bullet",
    "certifications",
]
KeywordImportance = Literal["high", "medium", "low"]
Severity = Literal["low", "medium", "high"]
DiffOp = Literal["equal", "insert", "delete"]
AnalysisStage = Literal[
    "validating",
    "normalizing",
    "extracting",
    "indexing",
    "matching",
    "scoring",
    "enhancing",
    "complete",
    "failed",
]


class Requirement(BaseModel):
    id: str
    text: str
    key: str
    category: RequirementCategory
    weight: float
    importance: RequirementImportance = "default"
    source_line: int | None = None
    source_text: str | None = None
    aliases: list[str] = Field(default_factory=list)
    min_years: int | None = None

    @field_validator("weight")
    @classmethod
    def _validate_weight(cls, value: float) -> float:
        if value <= 0 or value > 1:
            raise ValueError("weight must be in (0, 1]")
        return value


class EvidenceRef(BaseModel):
    unit_id: str
    section: EvidenceSection
    section_position: int
    entry_index: int | None = None
    index: int
    text: str
    confidence: float = Field(ge=0.0, le=1.0)
    match_type: MatchType


class MatchResult(BaseModel):
    requirement_id: str
    confidence: float = Field(ge=0.0, le=1.0)
    status: MatchStatus
    match_type: MatchType = "none"
    primary: EvidenceRef | None = None
    secondary: list[EvidenceRef] = Field(default_factory=list)
    strong: bool = False


class SuggestionLocation(BaseModel):
    section: SectionKind
    section_position: int | None = None
    entry_index: int | None = None
    bullet_index: int | None = None
    is_new: bool = False


class DiffSegment(BaseModel):
    op: DiffOp
    text: str


class EnhancementSuggestion(BaseModel):
    id: str
    requirement_id: str
    kind: SuggestionKind
    location: SuggestionLocation | None = None
    original_text: str | None = None
    proposed_text: str | None = None
    insertion: str | None = None
    delta: float
    rationale: str
    diff: list[DiffSegment] = Field(default_factory=list)


class ResumeModification(BaseModel):
    location: SuggestionLocation
    requirement_ids: list[str]
    suggestion_ids: list[str]
    original_text: str | None = None
    text: str
    diff: list[DiffSegment] = Field(default_factory=list)


class TailoredResume(BaseModel):
    resume: ResumeDocument
    modifications: list[ResumeModification] = Field(default_factory=list)


class ScoreBreakdown(BaseModel):
    total_weight: float
    earned_weight: float
    missing_weight: float
    category_scores: dict[RequirementCategory, float] = Field(default_factory=dict)


class KeywordMatch(BaseModel):
    keyword: str
    requirement_id: str
    found: bool
    importance: KeywordImportance
    frequency: int = 0
    context: str | None = None


class FeedbackItem(BaseModel):
    category: str
    message: str
    severity: Severity


class AnalysisNote(BaseModel):
    code: str
    message: str


class TailoringOptions(BaseModel):
    intensity: int = Field(default=100, ge=0, le=100)


class AnalysisResult(BaseModel):
    score: float = Field(ge=0.0, le=100.0)
    projected_score: float = Field(ge=0.0, le=100.0)
    breakdown: ScoreBreakdown
    requirements: list[Requirement] = Field(default_factory=list)
    matches: list[MatchResult] = Field(default_factory=list)
    matched: list[Requirement] = Field(default_factory=list)
    partial: list[Requirement] = Field(default_factory=list)
    unmatched: list[Requirement] = Field(default_factory=list)
    suggestions: list[EnhancementSuggestion] = Field(default_factory=list)
    tailored_resume: TailoredResume
    keywords: list[KeywordMatch] = Field(default_factory=list)
    feedback: list[FeedbackItem] = Field(default_factory=list)
    posting_profile: PostingProfile = Field(default_factory=PostingProfile)
    notes: list[AnalysisNote] = Field(default_factory=list)
    stages: list[AnalysisStage] = Field(default_factory=list)
    lexicon_version: str | None = None
