from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

SectionKind = Literal["summary", "experience", "education", "skills", "projects", "certifications"]


class ExperienceEntry(BaseModel):
    title: str = ""
    organization: str = ""
    location: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    current: bool = False
    bullets: list[str] = Field(default_factory=list)


class EducationEntry(BaseModel):
    institution: str = ""
    degree: str = ""
    field: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    highlights: list[str] = Field(default_factory=list)


class ProjectEntry(BaseModel):
    name: str = ""
    description: str | None = None
    technologies: list[str] = Field(default_factory=list)
    bullets: list[str] = Field(default_factory=list)


class SummarySection(BaseModel):
    kind: Literal["summary"] = "summary"
    content: str = ""


class ExperienceSection(BaseModel):
    kind: Literal["experience"] = "experience"
    entries: list[ExperienceEntry] = Field(default_factory=list)


class EducationSection(BaseModel):
    kind: Literal["education"] = "education"
    entries: list[EducationEntry] = Field(default_factory=list)


class SkillsSection(BaseModel):
    kind: Literal["skills"] = "skills"
    items: list[str] = Field(default_factory=list)


class ProjectsSection(BaseModel):
    kind: Literal["projects"] = "projects"
    entries: list[ProjectEntry] = Field(default_factory=list)


class CertificationsSection(BaseModel):
    kind: Literal["certifications"] = "certifications"
    items: list[str] = Field(default_factory=list)


ResumeSection = Annotated[
    Union[
        SummarySection,
        ExperienceSection,
        EducationSection,
        SkillsSection,
        ProjectsSection,
        CertificationsSection,
    ],
    Field(discriminator="kind"),
]


class ResumeDocument(BaseModel):
    """Section-tagged resume supplied by the acquisition layer; read-only for the engine."""

    sections: list[ResumeSection] = Field(default_factory=list)
    target_job_title: str | None = None

    def first_section(self, kind: SectionKind) -> tuple[int, ResumeSection] | None:
        for position, section in enumerate(self.sections):
            if section.kind == kind:
                return position, section
        return None
