from .posting_profile import build_posting_profile
from .requirement_extractor import extract_requirements
from .resume_index import EvidenceUnit, ResumeIndex, build_resume_index, parse_resume_date

__all__ = [
    "build_posting_profile",
    "extract_requirements",
    "EvidenceUnit",
    "ResumeIndex",
    "build_resume_index",
    "parse_resume_date",
]
