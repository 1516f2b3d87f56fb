from .services.tailoring_service import (
    AnalysisCancelled,
    InsufficientInputError,
    TailoringValidationError,
    analyze,
)

__all__ = ["AnalysisCancelled", "InsufficientInputError", "TailoringValidationError", "analyze"]
