"""Core engine types.

Provides:
- Evidence model (Confidence, EvidenceType, Evidence, EvidenceCollection)
- Dependency record
- Settings and error hierarchy
"""

from .config import Settings, load_settings
from .dependency import Dependency
from .errors import (
    AnalysisError,
    DepidentError,
    DownloadFailedError,
    ExceptionCollection,
    HintParseError,
    InitializationError,
    TooManyRequestsError,
)
from .evidence import Confidence, Evidence, EvidenceCollection, EvidenceType

__all__ = [
    "Settings",
    "load_settings",
    "Dependency",
    "AnalysisError",
    "DepidentError",
    "DownloadFailedError",
    "ExceptionCollection",
    "HintParseError",
    "InitializationError",
    "TooManyRequestsError",
    "Confidence",
    "Evidence",
    "EvidenceCollection",
    "EvidenceType",
]
