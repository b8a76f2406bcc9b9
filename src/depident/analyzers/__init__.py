"""Analyzers run by the engine.

Provides:
- Analyzer protocol, AbstractAnalyzer and AnalysisPhase
- HintAnalyzer for declarative evidence corrections
- DependencyMergingAnalyzer with pluggable MergeRule variants
- PackagePathAnalyzer variants for bundler, Swift PM and CocoaPods files
"""

from .base import AbstractAnalyzer, AnalysisPhase, Analyzer
from .hint import HintAnalyzer, apply_hints
from .merging import (
    DEFAULT_MERGE_RULES,
    AbstractDependencyComparingAnalyzer,
    DependencyMergingAnalyzer,
    GemspecMergeRule,
    MergeRule,
    SwiftPackageMergeRule,
    merge_dependencies,
)
from .package_path import (
    PackagePathAnalyzer,
    cocoapods_analyzer,
    ruby_bundler_analyzer,
    swift_package_manager_analyzer,
)

__all__ = [
    "AbstractAnalyzer",
    "AnalysisPhase",
    "Analyzer",
    "HintAnalyzer",
    "apply_hints",
    "DEFAULT_MERGE_RULES",
    "AbstractDependencyComparingAnalyzer",
    "DependencyMergingAnalyzer",
    "GemspecMergeRule",
    "MergeRule",
    "SwiftPackageMergeRule",
    "merge_dependencies",
    "PackagePathAnalyzer",
    "cocoapods_analyzer",
    "ruby_bundler_analyzer",
    "swift_package_manager_analyzer",
]
