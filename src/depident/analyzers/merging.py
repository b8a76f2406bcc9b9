"""Dependency merging: collapse files that describe one logical package.

Several files can describe a single installed package, for example the
bundler generated stub in specifications/ and the gemspec inside the gem
directory, or a Package.swift next to a podspec. Each ecosystem supplies
a MergeRule that says whether two dependencies are the same package and
which of the two should absorb the other. The comparing analyzer runs
every rule over every pair of dependencies.

Provides:
- MergeRule: Protocol for ecosystem merge heuristics
- GemspecMergeRule / SwiftPackageMergeRule: Built-in rules
- merge_dependencies: Fuse one dependency into another
- AbstractDependencyComparingAnalyzer: Pairwise scan driver
- DependencyMergingAnalyzer: Comparing analyzer evaluating an ordered rule list
"""

from abc import abstractmethod
from pathlib import PurePath
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import structlog

from depident.core.dependency import Dependency
from depident.core.errors import AnalysisError

from .base import AbstractAnalyzer, AnalysisPhase

if TYPE_CHECKING:
    from depident.engine import Engine

logger = structlog.get_logger()


@runtime_checkable
class MergeRule(Protocol):
    """Ecosystem heuristic deciding whether and how two dependencies merge."""

    name: str

    def matches(self, first: Dependency, second: Dependency) -> bool:
        ...

    def primary(self, first: Dependency, second: Dependency) -> Dependency:
        """Return whichever of the two inputs should absorb the other."""
        ...


def _same_package_path(first: Dependency, second: Dependency) -> bool:
    if first.package_path is None or second.package_path is None:
        return False
    return first.package_path.lower() == second.package_path.lower()


class GemspecMergeRule:
    """Two .gemspec files with the same package path are one gem.

    The stub generated by bundler under specifications/ holds the fully
    resolved metadata and wins; otherwise the second dependency wins.
    """

    name = "gemspec"
    suffix = ".gemspec"
    specifications_dir = "specifications"

    def matches(self, first: Dependency, second: Dependency) -> bool:
        if first is None or second is None:
            return False
        if not (first.file_name or "").endswith(self.suffix):
            return False
        if not (second.file_name or "").endswith(self.suffix):
            return False
        return _same_package_path(first, second)

    def primary(self, first: Dependency, second: Dependency) -> Dependency:
        parent = PurePath(first.actual_file_path).parent.name
        if parent.lower() == self.specifications_dir:
            return first
        return second


class SwiftPackageMergeRule:
    """A podspec and a Package.swift (or two of either) in one package path are one package.

    The podspec carries richer metadata and always wins.
    """

    name = "swift"
    podspec_suffix = ".podspec"
    manifest_name = "Package.swift"

    def _is_swift_file(self, dependency: Dependency) -> bool:
        file_name = dependency.file_name or ""
        return file_name.endswith(self.podspec_suffix) or file_name == self.manifest_name

    def matches(self, first: Dependency, second: Dependency) -> bool:
        if first is None or second is None:
            return False
        if not self._is_swift_file(first) or not self._is_swift_file(second):
            return False
        return _same_package_path(first, second)

    def primary(self, first: Dependency, second: Dependency) -> Dependency:
        if (first.file_name or "").endswith(self.podspec_suffix):
            return first
        return second


DEFAULT_MERGE_RULES: tuple[MergeRule, ...] = (GemspecMergeRule(), SwiftPackageMergeRule())


def merge_dependencies(
    dependency: Dependency,
    related: Dependency,
    to_remove: set[Dependency] | None = None,
) -> None:
    """Merge related into dependency.

    Copies all evidence, moves related's own related dependencies onto
    dependency, unions project references when both files have the same
    content hash, records related as a related dependency and marks it
    for removal.

    Args:
        dependency: Dependency that absorbs the other
        related: Dependency being merged away
        to_remove: Set collecting dependencies to drop after the scan
    """
    logger.debug("merging_dependencies", source=related.file_path, target=dependency.file_path)

    dependency.vendor_evidence.add_all(related.vendor_evidence)
    dependency.product_evidence.add_all(related.product_evidence)
    dependency.version_evidence.add_all(related.version_evidence)

    for nested in list(related.related_dependencies):
        dependency.add_related_dependency(nested)
        related.remove_related_dependency(nested)

    if dependency.sha1 is not None and dependency.sha1 == related.sha1:
        dependency.add_all_project_references(related.project_references)

    dependency.add_related_dependency(related)
    if to_remove is not None:
        to_remove.add(related)


class AbstractDependencyComparingAnalyzer(AbstractAnalyzer):
    """Compares every pair of dependencies once per run.

    evaluate_dependencies is called for each pair (i, j) with i < j,
    skipping dependencies already marked for removal. Marked dependencies
    are removed from the engine only after the whole scan so indices stay
    stable while iterating.
    """

    def analyze(self, engine: "Engine") -> list[AnalysisError]:
        errors: list[AnalysisError] = []
        if not self.enabled:
            return errors

        dependencies = engine.dependencies
        to_remove: set[Dependency] = set()

        for i, dependency in enumerate(dependencies):
            if dependency in to_remove:
                continue
            for next_dependency in dependencies[i + 1:]:
                if next_dependency in to_remove:
                    continue
                try:
                    if self.evaluate_dependencies(dependency, next_dependency, to_remove):
                        break
                except Exception as e:
                    self.log.warning(
                        "comparison_failed",
                        file=dependency.file_path,
                        other=next_dependency.file_path,
                        error=str(e),
                    )
                    error = AnalysisError(str(e), analyzer=self.name, file_path=dependency.file_path)
                    error.__cause__ = e
                    errors.append(error)

        if to_remove:
            engine.remove_dependencies(to_remove)
            self.log.debug("dependencies_merged", removed=len(to_remove))
        return errors

    def analyze_dependency(self, dependency: Dependency, engine: "Engine") -> None:
        """Unused: comparing analyzers work on pairs in analyze()."""

    @abstractmethod
    def evaluate_dependencies(
        self,
        dependency: Dependency,
        next_dependency: Dependency,
        to_remove: set[Dependency],
    ) -> bool:
        """Compare one pair.

        Returns:
            True when dependency itself was merged away, ending its inner loop
        """


class DependencyMergingAnalyzer(AbstractDependencyComparingAnalyzer):
    """Merges dependencies using an ordered list of MergeRule variants.

    The first rule whose matches() holds decides the pair. New ecosystems
    are supported by passing additional rules.
    """

    name = "Dependency Merging Analyzer"
    phase = AnalysisPhase.POST_INFORMATION_COLLECTION
    enabled_setting_key = "analyzer_dependency_merging_enabled"

    def __init__(self, rules=None):
        super().__init__()
        self.rules: tuple[MergeRule, ...] = tuple(rules) if rules is not None else DEFAULT_MERGE_RULES

    def evaluate_dependencies(
        self,
        dependency: Dependency,
        next_dependency: Dependency,
        to_remove: set[Dependency],
    ) -> bool:
        for rule in self.rules:
            if not rule.matches(dependency, next_dependency):
                continue
            main = rule.primary(dependency, next_dependency)
            if main is dependency:
                merge_dependencies(dependency, next_dependency, to_remove)
                return False
            if main is next_dependency:
                merge_dependencies(next_dependency, dependency, to_remove)
                return True
            raise ValueError(f"Merge rule '{rule.name}' returned a dependency that is not part of the pair")
        return False
