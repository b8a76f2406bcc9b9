"""Engine for running analyzers over the dependency working set.

Pipeline: initialize analyzers -> run phases in order -> within a phase,
run analyzers in registration order -> collect per-dependency failures
-> raise them together at the end.

Initialization failures abort the run before any dependency is touched.
Per-dependency failures never stop the run.
"""

import structlog

from depident.analyzers.base import AnalysisPhase, Analyzer
from depident.analyzers.hint import HintAnalyzer
from depident.analyzers.merging import DependencyMergingAnalyzer
from depident.analyzers.package_path import (
    cocoapods_analyzer,
    ruby_bundler_analyzer,
    swift_package_manager_analyzer,
)
from depident.core.config import Settings
from depident.core.dependency import Dependency
from depident.core.errors import AnalysisError, ExceptionCollection, InitializationError

logger = structlog.get_logger()


def default_analyzers() -> list[Analyzer]:
    """Built-in analyzers in registration order."""
    return [
        ruby_bundler_analyzer(),
        swift_package_manager_analyzer(),
        cocoapods_analyzer(),
        DependencyMergingAnalyzer(),
        HintAnalyzer(),
    ]


class Engine:
    """Runs registered analyzers over a set of dependencies.

    Settings are passed in explicitly; the engine holds no global state.

    Example:
        >>> engine = Engine(load_settings())
        >>> engine.add_dependencies(found_by_file_analyzers)
        >>> await engine.analyze_dependencies()
        >>> for dependency in engine.dependencies:
        ...     print(dependency.display_name)
    """

    def __init__(self, settings: Settings, analyzers: list[Analyzer] | None = None):
        self.settings = settings
        self.analyzers: list[Analyzer] = list(analyzers) if analyzers is not None else default_analyzers()
        self._dependencies: dict[Dependency, None] = {}
        self._initialized = False
        self.log = logger.bind(component="engine")

    @property
    def dependencies(self) -> list[Dependency]:
        """Snapshot of the working set in insertion order."""
        return list(self._dependencies)

    def contains(self, dependency: Dependency) -> bool:
        return dependency in self._dependencies

    def add_dependency(self, dependency: Dependency) -> None:
        self._dependencies[dependency] = None

    def add_dependencies(self, dependencies) -> None:
        for dependency in dependencies:
            self.add_dependency(dependency)

    def remove_dependencies(self, dependencies) -> None:
        for dependency in dependencies:
            self._dependencies.pop(dependency, None)

    def analyzers_for_phase(self, phase: AnalysisPhase) -> list[Analyzer]:
        return [analyzer for analyzer in self.analyzers if analyzer.phase == phase]

    async def initialize(self) -> None:
        """Initialize every analyzer once.

        Raises:
            InitializationError: If any analyzer fails; remaining analyzers are closed
        """
        if self._initialized:
            return
        for analyzer in self.analyzers:
            try:
                await analyzer.initialize(self.settings)
            except InitializationError:
                self.log.error("analyzer_initialization_failed", analyzer=analyzer.name)
                self.close()
                raise
            except Exception as e:
                self.log.error("analyzer_initialization_failed", analyzer=analyzer.name, error=str(e))
                self.close()
                raise InitializationError(f"Unable to initialize {analyzer.name}: {e}") from e
        self._initialized = True
        self.log.info("engine_initialized", analyzers=len(self.analyzers))

    async def analyze_dependencies(self) -> None:
        """Run all phases over the working set.

        Raises:
            InitializationError: If analyzers cannot be initialized (nothing is analyzed)
            ExceptionCollection: With every per-dependency AnalysisError, after the run completes
        """
        await self.initialize()

        self.log.info("analysis_start", dependencies=len(self._dependencies))
        errors: list[AnalysisError] = []
        for phase in AnalysisPhase:
            for analyzer in self.analyzers_for_phase(phase):
                if not analyzer.enabled:
                    continue
                self.log.debug("analyzer_start", analyzer=analyzer.name, phase=phase.name)
                errors.extend(analyzer.analyze(self))

        self.log.info(
            "analysis_complete",
            dependencies=len(self._dependencies),
            errors=len(errors),
        )
        if errors:
            raise ExceptionCollection(errors)

    def close(self) -> None:
        """Close every analyzer, logging failures."""
        for analyzer in self.analyzers:
            try:
                analyzer.close()
            except Exception as e:
                self.log.warning("analyzer_close_failed", analyzer=analyzer.name, error=str(e))
        self._initialized = False
