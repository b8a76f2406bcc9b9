"""Hint analyzer: applies declarative hint rules to dependency evidence.

Provides:
- HintAnalyzer: Loads rules at initialization and applies them to each dependency
- apply_hints: Apply a rule set to one dependency
"""

from depident.core.config import Settings
from depident.core.dependency import Dependency
from depident.core.errors import HintParseError, InitializationError
from depident.core.evidence import Evidence, EvidenceCollection
from depident.hints.loader import load_hint_rules
from depident.hints.rules import HintRule, HintRuleSet, VendorDuplicatingHintRule

from .base import AbstractAnalyzer, AnalysisPhase


def _any_present(givens: list[Evidence], collection: EvidenceCollection) -> bool:
    return any(given in collection for given in givens)


def _rule_matches(rule: HintRule, dependency: Dependency) -> bool:
    return (
        _any_present(rule.given_vendor, dependency.vendor_evidence)
        or _any_present(rule.given_product, dependency.product_evidence)
        or _any_present(rule.given_version, dependency.version_evidence)
        or any(pattern.matches(dependency.file_name) for pattern in rule.filenames)
    )


def apply_hints(
    dependency: Dependency,
    rules: tuple[HintRule, ...] | list[HintRule],
    vendor_rules: tuple[VendorDuplicatingHintRule, ...] | list[VendorDuplicatingHintRule],
) -> None:
    """Apply hint rules and vendor duplicating rules to one dependency.

    Rules are evaluated in order against the evidence as left by the
    previous rules. A rule fires when any given evidence is present or
    any filename pattern matches; firing adds all add-evidence and then
    removes all present remove-evidence.

    Vendor duplicates are computed from a snapshot of the final vendor
    evidence and added afterwards, so duplicates never trigger further
    duplication in the same pass.

    Args:
        dependency: Dependency to update in place
        rules: Hint rules in evaluation order
        vendor_rules: Vendor duplicating rules
    """
    for rule in rules:
        if not _rule_matches(rule, dependency):
            continue
        for collection, additions in (
            (dependency.vendor_evidence, rule.add_vendor),
            (dependency.product_evidence, rule.add_product),
            (dependency.version_evidence, rule.add_version),
        ):
            for evidence in additions:
                collection.add(evidence)
        for collection, removals in (
            (dependency.vendor_evidence, rule.remove_vendor),
            (dependency.product_evidence, rule.remove_product),
            (dependency.version_evidence, rule.remove_version),
        ):
            for evidence in removals:
                collection.remove(evidence)

    duplicates = []
    for evidence in dependency.vendor_evidence:
        value = evidence.value.lower()
        for vendor_rule in vendor_rules:
            if vendor_rule.value.lower() == value:
                duplicates.append(
                    Evidence(
                        source=f"{evidence.source} (hint)",
                        name=evidence.name,
                        value=vendor_rule.duplicate,
                        confidence=evidence.confidence,
                    )
                )
    for evidence in duplicates:
        dependency.vendor_evidence.add(evidence)


class HintAnalyzer(AbstractAnalyzer):
    """Adds and removes evidence using hint rules to improve identification.

    Rules are loaded once during initialization (built-in rules plus the
    optional settings.hints_file) and shared read-only afterwards.
    """

    name = "Hint Analyzer"
    phase = AnalysisPhase.PRE_IDENTIFIER_ANALYSIS
    enabled_setting_key = "analyzer_hint_enabled"

    def __init__(self, rules: HintRuleSet | None = None):
        super().__init__()
        self.rules = rules

    async def prepare(self, settings: Settings) -> None:
        if self.rules is not None:
            return
        try:
            self.rules = await load_hint_rules(settings)
        except HintParseError as e:
            self.log.debug("hint_file_unparseable", error=str(e))
            raise InitializationError("Unable to parse the hint file") from e
        self.log.debug(
            "hint_rules_ready",
            hints=len(self.rules.hints),
            vendor_duplicating_hints=len(self.rules.vendor_duplicating_hints),
        )

    def analyze_dependency(self, dependency: Dependency, engine) -> None:
        apply_hints(dependency, self.rules.hints, self.rules.vendor_duplicating_hints)
