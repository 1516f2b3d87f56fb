from .analysis import (
    AnalysisNote,
    AnalysisResult,
    DiffSegment,
    EnhancementSuggestion,
    EvidenceRef,
    FeedbackItem,
    KeywordMatch,
    MatchResult,
    Requirement,
    ResumeModification,
    ScoreBreakdown,
    SuggestionLocation,
    TailoredResume,
    TailoringOptions,
)
from .posting import JobPosting, PostingProfile
from .resume import (
    CertificationsSection,
    EducationEntry,
    EducationSection,
    ExperienceEntry,
    ExperienceSection,
    ProjectEntry,
    ProjectsSection,
    ResumeDocument,
    SkillsSection,
    SummarySection,
)

__all__ = [
    "AnalysisNote",
    "AnalysisResult",
    "DiffSegment",
    "EnhancementSuggestion",
    "EvidenceRef",
    "FeedbackItem",
    "KeywordMatch",
    "MatchResult",
    "Requirement",
    "ResumeModification",
    "ScoreBreakdown",
    "SuggestionLocation",
    "TailoredResume",
    "TailoringOptions",
    "JobPosting",
    "PostingProfile",
    "CertificationsSection",
    "EducationEntry",
    "EducationSection",
    "ExperienceEntry",
    "ExperienceSection",
    "ProjectEntry",
    "ProjectsSection",
    "ResumeDocument",
    "SkillsSection",
    "SummarySection",
]
