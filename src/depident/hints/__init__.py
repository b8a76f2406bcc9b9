"""Declarative hint rules for correcting dependency evidence.

Provides:
- Rule types (HintRule, VendorDuplicatingHintRule, PropertyType, HintRuleSet)
- HintParser for the XML rule format
- load_hint_rules to resolve built-in and external rule files
"""

from .loader import BASE_HINT_RULE_FILE, load_builtin_rules, load_hint_rules
from .parser import HintParser
from .rules import HintRule, HintRuleSet, PropertyType, VendorDuplicatingHintRule

__all__ = [
    "BASE_HINT_RULE_FILE",
    "load_builtin_rules",
    "load_hint_rules",
    "HintParser",
    "HintRule",
    "HintRuleSet",
    "PropertyType",
    "VendorDuplicatingHintRule",
]
