# src/flowengine/resume/__init__.py
"""Resume Reconstructor: reconstrução tolerante a lacunas após execução externa."""

from .reconstructor import build_resume_object, default_metadata, prepare_resume
from .types import MissingResultWarning, ResumeObject, ResumeReport
from .validation import validate_resume_object

__all__ = [
    "prepare_resume",
    "build_resume_object",
    "default_metadata",
    "validate_resume_object",
    "MissingResultWarning",
    "ResumeObject",
    "ResumeReport",
]
