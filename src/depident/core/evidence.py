"""Weighted evidence about a dependency's vendor, product and version.

Every observation an analyzer makes about a dependency is recorded as an
Evidence item tagged with its source and a confidence level. Evidence is
immutable; corrections are expressed by adding or removing items from an
EvidenceCollection.

Provides:
- Confidence: Ordered confidence levels (LOW < MEDIUM < HIGH < HIGHEST)
- EvidenceType: The three identity axes (vendor, product, version)
- Evidence: Single immutable observation with source attribution
- EvidenceCollection: Ordered, duplicate-free set of evidence for one axis
"""

from enum import Enum
from typing import Iterator

from pydantic import BaseModel, ConfigDict


class Confidence(str, Enum):
    """Confidence level attached to a piece of evidence.

    Only used to weight evidence during matching; it never decides
    whether evidence is stored.
    """

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    HIGHEST = "HIGHEST"

    @property
    def weight(self) -> int:
        return _CONFIDENCE_WEIGHTS[self]

    @classmethod
    def parse(cls, text: str) -> "Confidence":
        """Parse a confidence name case-insensitively.

        Raises:
            ValueError: If text is not a known confidence name
        """
        try:
            return cls(text.strip().upper())
        except ValueError:
            raise ValueError(f"Unknown confidence: {text!r}") from None

    def __lt__(self, other):
        if not isinstance(other, Confidence):
            return NotImplemented
        return self.weight < other.weight

    def __le__(self, other):
        if not isinstance(other, Confidence):
            return NotImplemented
        return self.weight <= other.weight

    def __gt__(self, other):
        if not isinstance(other, Confidence):
            return NotImplemented
        return self.weight > other.weight

    def __ge__(self, other):
        if not isinstance(other, Confidence):
            return NotImplemented
        return self.weight >= other.weight


_CONFIDENCE_WEIGHTS = {
    Confidence.LOW: 1,
    Confidence.MEDIUM: 2,
    Confidence.HIGH: 3,
    Confidence.HIGHEST: 4,
}


class EvidenceType(str, Enum):
    """Identity axis an evidence item describes."""

    VENDOR = "vendor"
    PRODUCT = "product"
    VERSION = "version"


class Evidence(BaseModel):
    """Single immutable observation about a dependency.

    Identity is (source, name, value) compared case-insensitively.
    Confidence is metadata and takes no part in equality or hashing,
    so the same observation reported at two confidence levels is
    stored once.

    Attributes:
        source: Analyzer or file the evidence came from (e.g., "Manifest")
        name: Field the value was read from (e.g., "Implementation-Vendor")
        value: The observed text
        confidence: Weight used when ranking identification matches
    """

    model_config = ConfigDict(frozen=True)

    source: str
    name: str
    value: str
    confidence: Confidence = Confidence.MEDIUM

    def _key(self) -> tuple[str, str, str]:
        return (self.source.lower(), self.name.lower(), self.value.lower())

    def __eq__(self, other) -> bool:
        if not isinstance(other, Evidence):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        return f"Evidence{{name={self.name}, source={self.source}, value={self.value}, confidence={self.confidence.value}}}"


class EvidenceCollection:
    """Ordered, duplicate-free set of evidence for one identity axis.

    Backed by an insertion-ordered dict mapping each item to its stored
    copy, so membership is O(1) and iteration follows insertion order.
    Adding an equal item with a higher confidence upgrades the stored copy
    in place; confidence never decreases. Also carries weighting terms that
    boost matching for this axis downstream.
    """

    def __init__(self, evidence_type: EvidenceType, evidence=None):
        self.evidence_type = evidence_type
        self._items: dict[Evidence, Evidence] = {}
        self._weightings: dict[str, None] = {}
        for item in evidence or ():
            self.add(item)

    def add(self, evidence: Evidence) -> bool:
        """Add evidence.

        Returns:
            False if an equal item with the same or higher confidence was already present
        """
        stored = self._items.get(evidence)
        if stored is not None and stored.confidence >= evidence.confidence:
            return False
        self._items[evidence] = evidence
        return True

    def add_evidence(
        self,
        source: str,
        name: str,
        value: str,
        confidence: Confidence = Confidence.MEDIUM,
    ) -> bool:
        return self.add(Evidence(source=source, name=name, value=value, confidence=confidence))

    def add_all(self, evidence) -> None:
        for item in list(evidence):
            self.add(item)

    def remove(self, evidence: Evidence) -> bool:
        """Remove evidence if present; returns whether anything was removed."""
        if evidence in self._items:
            del self._items[evidence]
            return True
        return False

    def get(self, evidence: Evidence) -> Evidence | None:
        """Return the stored item equal to evidence (keeps the stored confidence)."""
        return self._items.get(evidence)

    def get_evidence(self, source: str | None = None, name: str | None = None) -> list[Evidence]:
        """Return evidence filtered by source and/or name (case-insensitive)."""
        result = []
        for item in self._items.values():
            if source is not None and item.source.lower() != source.lower():
                continue
            if name is not None and item.name.lower() != name.lower():
                continue
            result.append(item)
        return result

    def iter_confidence(self, confidence: Confidence) -> Iterator[Evidence]:
        """Iterate over evidence of exactly the given confidence."""
        return (item for item in self._items.values() if item.confidence == confidence)

    def contains_value(self, text: str) -> bool:
        """Case-insensitive substring check across all evidence values."""
        needle = text.lower()
        return any(needle in item.value.lower() for item in self._items.values())

    def add_weighting(self, term: str) -> None:
        self._weightings[term] = None

    @property
    def weightings(self) -> list[str]:
        return list(self._weightings)

    def clear(self) -> None:
        self._items.clear()

    def __contains__(self, evidence) -> bool:
        return evidence in self._items

    def __iter__(self) -> Iterator[Evidence]:
        return iter(list(self._items.values()))

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __repr__(self) -> str:
        return f"EvidenceCollection({self.evidence_type.value}, {len(self._items)} items)"

    def __str__(self) -> str:
        return "\n".join(str(item) for item in self._items.values())
