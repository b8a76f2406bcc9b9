"""Dependency model: one physical file discovered during a scan.

A Dependency is created by a file analyzer, enriched with evidence by
later analyzers, corrected by the hint analyzer and possibly absorbed by
another Dependency during merging. Equality and hashing are by object
identity so two structurally identical records stay distinguishable.

Provides:
- Dependency: Mutable record of a file and the evidence gathered about it
"""

import hashlib
import os
from dataclasses import dataclass, field

import structlog

from .evidence import Confidence, EvidenceCollection, EvidenceType

logger = structlog.get_logger()

_HASH_CHUNK_SIZE = 65536


class _LazySha1:
    """Dataclass field descriptor hashing the backing file on first read.

    Assigning None clears the cached value so the next read hashes again.
    """

    def __set_name__(self, owner, name):
        self._attr = f"_{name}"

    def __get__(self, obj, objtype=None):
        if obj is None:
            return None
        if self._attr not in obj.__dict__:
            obj.__dict__[self._attr] = obj._compute_sha1()
        return obj.__dict__[self._attr]

    def __set__(self, obj, value):
        if value is None:
            obj.__dict__.pop(self._attr, None)
        else:
            obj.__dict__[self._attr] = value


@dataclass(eq=False)
class Dependency:
    """A single file that may denote a third-party component.

    Attributes:
        file_path: Path of the file as seen by the user (may point inside an archive)
        actual_file_path: Path of the file on disk (e.g., temp extraction directory)
        file_name: Base name of the file
        ecosystem: Ecosystem tag (e.g., "Ruby.Bundle", "Swift.PM")
        package_path: Logical grouping key used by merge heuristics
        name: Display name of the component, when known
        version: Version of the component, when known
        is_virtual: True when the dependency has no backing file
        sha1: Content hash, computed on first access unless given
        related_dependencies: Dependencies merged into this one
        project_references: Projects/modules the file was found in
    """

    file_path: str
    actual_file_path: str | None = None
    file_name: str | None = None
    ecosystem: str | None = None
    package_path: str | None = None
    name: str | None = None
    version: str | None = None
    is_virtual: bool = False
    sha1: str | None = _LazySha1()
    vendor_evidence: EvidenceCollection = field(
        default_factory=lambda: EvidenceCollection(EvidenceType.VENDOR)
    )
    product_evidence: EvidenceCollection = field(
        default_factory=lambda: EvidenceCollection(EvidenceType.PRODUCT)
    )
    version_evidence: EvidenceCollection = field(
        default_factory=lambda: EvidenceCollection(EvidenceType.VERSION)
    )
    related_dependencies: set["Dependency"] = field(default_factory=set)
    project_references: set[str] = field(default_factory=set)

    def __post_init__(self):
        if self.actual_file_path is None:
            self.actual_file_path = self.file_path
        if self.file_name is None:
            self.file_name = os.path.basename(self.file_path)

    def _compute_sha1(self) -> str | None:
        """SHA-1 of the actual file contents, or None if virtual or unreadable."""
        if self.is_virtual or not os.path.isfile(self.actual_file_path):
            return None
        digest = hashlib.sha1()
        try:
            with open(self.actual_file_path, "rb") as fh:
                for chunk in iter(lambda: fh.read(_HASH_CHUNK_SIZE), b""):
                    digest.update(chunk)
        except OSError as e:
            logger.warning("dependency_hash_failed", file=self.actual_file_path, error=str(e))
            return None
        return digest.hexdigest()

    def evidence(self, evidence_type: EvidenceType) -> EvidenceCollection:
        """Return the evidence collection for one identity axis."""
        if evidence_type == EvidenceType.VENDOR:
            return self.vendor_evidence
        if evidence_type == EvidenceType.PRODUCT:
            return self.product_evidence
        return self.version_evidence

    def add_evidence(
        self,
        evidence_type: EvidenceType,
        source: str,
        name: str,
        value: str,
        confidence: Confidence = Confidence.MEDIUM,
    ) -> bool:
        return self.evidence(evidence_type).add_evidence(source, name, value, confidence)

    def add_vendor_weighting(self, term: str) -> None:
        self.vendor_evidence.add_weighting(term)

    def add_product_weighting(self, term: str) -> None:
        self.product_evidence.add_weighting(term)

    def add_related_dependency(self, dependency: "Dependency") -> None:
        if dependency is self:
            logger.warning("self_reference_ignored", file=self.file_path)
            return
        self.related_dependencies.add(dependency)

    def remove_related_dependency(self, dependency: "Dependency") -> None:
        self.related_dependencies.discard(dependency)

    def add_project_reference(self, reference: str) -> None:
        self.project_references.add(reference)

    def add_all_project_references(self, references) -> None:
        self.project_references.update(references)

    @property
    def display_name(self) -> str:
        if self.name and self.version:
            return f"{self.name}:{self.version}"
        return self.name or self.file_name

    def __repr__(self) -> str:
        return f"Dependency(file_path={self.file_path!r}, package_path={self.package_path!r})"
