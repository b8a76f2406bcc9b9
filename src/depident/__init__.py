"""Evidence and identity resolution for third-party dependencies.

Provides:
- Evidence model and Dependency record (depident.core)
- Search term normalization (depident.search)
- Hint rules (depident.hints)
- Analyzers and the Engine that runs them
"""

from .core import Confidence, Dependency, Evidence, EvidenceCollection, EvidenceType, Settings, load_settings
from .engine import Engine, default_analyzers

__version__ = "0.1.0"

__all__ = [
    "Confidence",
    "Dependency",
    "Evidence",
    "EvidenceCollection",
    "EvidenceType",
    "Settings",
    "load_settings",
    "Engine",
    "default_analyzers",
]
