"""Hint rule data types.

Hint rules are declarative corrections for systematic evidence noise.
They are loaded from XML rule files and evaluated by the hint analyzer.

Provides:
- PropertyType: Filename pattern (literal or regex, optionally case-sensitive)
- HintRule: Given conditions plus evidence to add and remove
- VendorDuplicatingHintRule: Adds an alternate spelling of a vendor
- HintRuleSet: Immutable pair of rule tuples produced by the loader
"""

import re
from dataclasses import dataclass, field

from depident.core.evidence import Evidence


@dataclass(frozen=True)
class PropertyType:
    """Pattern matched against a dependency's file name.

    Attributes:
        value: Literal text or regular expression
        regex: Treat value as a regular expression (full match)
        case_sensitive: Compare with case sensitivity
    """

    value: str
    regex: bool = False
    case_sensitive: bool = False

    def matches(self, text: str | None) -> bool:
        if text is None:
            return False
        if self.regex:
            flags = 0 if self.case_sensitive else re.IGNORECASE
            return re.fullmatch(self.value, text, flags) is not None
        if self.case_sensitive:
            return self.value == text
        return self.value.lower() == text.lower()


@dataclass
class HintRule:
    """A rule that adds and removes evidence when any given condition holds."""

    given_vendor: list[Evidence] = field(default_factory=list)
    given_product: list[Evidence] = field(default_factory=list)
    given_version: list[Evidence] = field(default_factory=list)
    filenames: list[PropertyType] = field(default_factory=list)
    add_vendor: list[Evidence] = field(default_factory=list)
    add_product: list[Evidence] = field(default_factory=list)
    add_version: list[Evidence] = field(default_factory=list)
    remove_vendor: list[Evidence] = field(default_factory=list)
    remove_product: list[Evidence] = field(default_factory=list)
    remove_version: list[Evidence] = field(default_factory=list)


@dataclass(frozen=True)
class VendorDuplicatingHintRule:
    """When a vendor value equals `value` (ignoring case), also add `duplicate`."""

    value: str
    duplicate: str


@dataclass(frozen=True)
class HintRuleSet:
    hints: tuple[HintRule, ...] = ()
    vendor_duplicating_hints: tuple[VendorDuplicatingHintRule, ...] = ()

    def extend(self, other: "HintRuleSet") -> "HintRuleSet":
        return HintRuleSet(
            hints=self.hints + other.hints,
            vendor_duplicating_hints=self.vendor_duplicating_hints + other.vendor_duplicating_hints,
        )
