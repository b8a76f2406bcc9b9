"""Package path enrichment for ecosystems whose files are merged later.

The merge rules group files by package path, so the file types they
handle need a package path before POST_INFORMATION_COLLECTION. One
generic analyzer is configured with a file acceptance predicate and a
path resolver; variants are built by composition instead of
subclassing.

Provides:
- PackagePathAnalyzer: Generic analyzer parameterized by accept/resolve callables
- ruby_bundler_analyzer: gemspec stubs from `bundle install --deployment`
- swift_package_manager_analyzer: Package.swift manifests
- cocoapods_analyzer: podspec files
"""

from pathlib import Path, PurePath
from typing import Callable

from depident.core.dependency import Dependency

from .base import AbstractAnalyzer, AnalysisPhase

AcceptFn = Callable[[Dependency], bool]
ResolveFn = Callable[[Dependency], str | None]

SPECIFICATIONS = "specifications"
GEMS = "gems"


class PackagePathAnalyzer(AbstractAnalyzer):
    """Sets package path and ecosystem on dependencies accepted by a predicate.

    Args:
        name: Analyzer name used in logs and errors
        accept: Predicate selecting the dependencies this analyzer handles
        resolve: Returns the package path for an accepted dependency, or None to leave it unset
        ecosystem: Ecosystem tag applied to accepted dependencies
        enabled_setting_key: Settings attribute toggling the analyzer
    """

    phase = AnalysisPhase.INFORMATION_COLLECTION

    def __init__(
        self,
        name: str,
        accept: AcceptFn,
        resolve: ResolveFn,
        ecosystem: str | None = None,
        enabled_setting_key: str | None = None,
    ):
        self.name = name
        self.enabled_setting_key = enabled_setting_key
        super().__init__()
        self.accept = accept
        self.resolve = resolve
        self.ecosystem = ecosystem

    def analyze_dependency(self, dependency: Dependency, engine) -> None:
        if not self.accept(dependency):
            return
        if self.ecosystem:
            dependency.ecosystem = self.ecosystem
        package_path = self.resolve(dependency)
        if package_path is not None:
            dependency.package_path = package_path


def has_suffix(suffix: str) -> AcceptFn:
    return lambda dependency: (dependency.file_name or "").endswith(suffix)


def has_name(file_name: str) -> AcceptFn:
    return lambda dependency: dependency.file_name == file_name


def in_directory(directory: str, accept: AcceptFn) -> AcceptFn:
    """Narrow accept to files whose parent directory is named directory."""

    def _accept(dependency: Dependency) -> bool:
        return accept(dependency) and PurePath(dependency.file_path).parent.name == directory

    return _accept


def parent_directory(dependency: Dependency) -> str | None:
    parent = PurePath(dependency.file_path).parent
    return str(parent) if parent.name else None


def bundler_gem_directory(dependency: Dependency) -> str | None:
    """Locate gems/<name> for a specifications/<name>.gemspec stub.

    When the stub was extracted from an archive the actual path differs
    from the reported path; the gem directory is then derived from the
    reported path without checking it exists.
    """
    actual = Path(dependency.actual_file_path)
    gem_name = actual.name[: -len(".gemspec")]
    specifications_dir = actual.parent
    if specifications_dir.name != SPECIFICATIONS or not specifications_dir.is_dir():
        return None
    gem_dir = specifications_dir.parent / GEMS / gem_name
    if not gem_dir.is_dir():
        return None
    if dependency.actual_file_path == dependency.file_path:
        return str(gem_dir.absolute())
    reported_spec_dir = PurePath(dependency.file_path).parent
    if reported_spec_dir.name != SPECIFICATIONS:
        return None
    return str(reported_spec_dir.parent / GEMS / gem_name)


def ruby_bundler_analyzer() -> PackagePathAnalyzer:
    return PackagePathAnalyzer(
        name="Ruby Bundler Analyzer",
        accept=in_directory(SPECIFICATIONS, has_suffix(".gemspec")),
        resolve=bundler_gem_directory,
        ecosystem="Ruby.Bundle",
        enabled_setting_key="analyzer_ruby_bundler_enabled",
    )


def swift_package_manager_analyzer() -> PackagePathAnalyzer:
    return PackagePathAnalyzer(
        name="SWIFT Package Manager Analyzer",
        accept=has_name("Package.swift"),
        resolve=parent_directory,
        ecosystem="Swift.PM",
        enabled_setting_key="analyzer_swift_package_manager_enabled",
    )


def cocoapods_analyzer() -> PackagePathAnalyzer:
    return PackagePathAnalyzer(
        name="CocoaPods Analyzer",
        accept=has_suffix(".podspec"),
        resolve=parent_directory,
        ecosystem="CocoaPods",
        enabled_setting_key="analyzer_cocoapods_enabled",
    )
