"""Analyzer protocol and shared infrastructure.

Provides:
- AnalysisPhase: Ordered phases the engine runs analyzers in
- Analyzer: Protocol every analyzer implements
- AbstractAnalyzer: Base class handling enablement, initialization and per-dependency error collection
"""

from abc import ABC, abstractmethod
from enum import IntEnum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import structlog

from depident.core.config import Settings
from depident.core.dependency import Dependency
from depident.core.errors import AnalysisError

if TYPE_CHECKING:
    from depident.engine import Engine

logger = structlog.get_logger()


class AnalysisPhase(IntEnum):
    """Phases in the order the engine runs them."""

    INITIAL = 0
    PRE_INFORMATION_COLLECTION = 1
    INFORMATION_COLLECTION = 2
    POST_INFORMATION_COLLECTION = 3
    PRE_IDENTIFIER_ANALYSIS = 4
    IDENTIFIER_ANALYSIS = 5
    POST_IDENTIFIER_ANALYSIS = 6
    PRE_FINDING_ANALYSIS = 7
    FINDING_ANALYSIS = 8
    POST_FINDING_ANALYSIS = 9
    FINAL = 10


@runtime_checkable
class Analyzer(Protocol):
    """Protocol for analyzers run by the engine."""

    name: str
    phase: AnalysisPhase
    enabled: bool

    async def initialize(self, settings: Settings) -> None:
        """One-time setup; raises InitializationError on failure."""
        ...

    def analyze(self, engine: "Engine") -> list[AnalysisError]:
        """Visit the engine's working set; return per-dependency failures."""
        ...

    def close(self) -> None:
        ...


class AbstractAnalyzer(ABC):
    """Base analyzer.

    Subclasses set name, phase and enabled_setting_key, implement
    analyze_dependency and optionally prepare. Instances keep no
    per-dependency state, so analyze_dependency may be called for
    independent dependencies from several workers.
    """

    name: str = "Abstract Analyzer"
    phase: AnalysisPhase = AnalysisPhase.INITIAL
    enabled_setting_key: str | None = None

    def __init__(self):
        self.settings: Settings | None = None
        self.enabled = True
        self.initialized = False
        self.log = logger.bind(analyzer=self.name)

    async def initialize(self, settings: Settings) -> None:
        """Record settings, check the enabled toggle and run prepare once.

        Raises:
            InitializationError: If prepare fails
        """
        if self.initialized:
            return
        self.settings = settings
        self.enabled = settings.is_analyzer_enabled(self.enabled_setting_key)
        if self.enabled:
            await self.prepare(settings)
            self.log.debug("analyzer_initialized")
        else:
            self.log.debug("analyzer_disabled", setting=self.enabled_setting_key)
        self.initialized = True

    async def prepare(self, settings: Settings) -> None:
        """Analyzer specific setup. Default: nothing."""

    def analyze(self, engine: "Engine") -> list[AnalysisError]:
        """Run analyze_dependency over every dependency still in the working set."""
        errors: list[AnalysisError] = []
        if not self.enabled:
            return errors
        for dependency in engine.dependencies:
            if not engine.contains(dependency):
                continue
            try:
                self.analyze_dependency(dependency, engine)
            except Exception as e:
                self.log.warning("analyzer_failed", file=dependency.file_path, error=str(e))
                error = AnalysisError(str(e), analyzer=self.name, file_path=dependency.file_path)
                error.__cause__ = e
                errors.append(error)
        return errors

    @abstractmethod
    def analyze_dependency(self, dependency: Dependency, engine: "Engine") -> None:
        """Analyze one dependency, mutating it in place."""

    def close(self) -> None:
        """Release resources. Default: nothing."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, phase={self.phase.name})"
