"""Exception hierarchy for the identity resolution engine.

Provides:
- DepidentError: Base class for all engine errors
- InitializationError: Analyzer could not be initialized (fatal)
- HintParseError: Hint rule data is malformed or cannot be resolved
- DownloadFailedError: A remote file could not be fetched
- TooManyRequestsError: Remote server answered HTTP 429
- AnalysisError: One analyzer failed on one dependency
- ExceptionCollection: All per-dependency failures of a run
"""


class DepidentError(Exception):
    """Base class for engine errors."""


class InitializationError(DepidentError):
    """Raised when an analyzer fails to initialize.

    Aborts the run before any dependency is analyzed.
    """


class HintParseError(DepidentError):
    """Raised when hint rules cannot be parsed or located."""


class DownloadFailedError(DepidentError):
    """Raised when a file download fails."""


class TooManyRequestsError(DownloadFailedError):
    """Raised when the remote server rate limits the download (HTTP 429)."""


class AnalysisError(DepidentError):
    """Failure of a single analyzer on a single dependency.

    Attributes:
        analyzer: Name of the analyzer that failed
        file_path: File path of the dependency being analyzed
    """

    def __init__(self, message: str, analyzer: str | None = None, file_path: str | None = None):
        super().__init__(message)
        self.analyzer = analyzer
        self.file_path = file_path

    def __str__(self) -> str:
        base = super().__str__()
        if self.analyzer or self.file_path:
            return f"{base} (analyzer={self.analyzer}, file={self.file_path})"
        return base


class ExceptionCollection(DepidentError):
    """Aggregate of per-dependency analysis failures raised at the end of a run."""

    def __init__(self, exceptions: list[Exception], message: str | None = None):
        self.exceptions = list(exceptions)
        super().__init__(message or f"{len(self.exceptions)} error(s) occurred during analysis")

    def __str__(self) -> str:
        lines = [super().__str__()]
        for exc in self.exceptions:
            lines.append(f"  - {exc}")
        return "\n".join(lines)
