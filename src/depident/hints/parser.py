"""Parser for hint rule XML files.

Rule file format (version 1.x):

    <hints version="1.1">
      <hint>
        <given>
          <evidence type="product" source="Manifest" name="Implementation-Title"
                    value="Spring Framework" confidence="HIGH"/>
          <fileName contains="spring-core.*\\.jar" regex="true" caseSensitive="false"/>
        </given>
        <add>
          <evidence type="vendor" source="hint analyzer" name="vendor"
                    value="pivotal" confidence="HIGHEST"/>
        </add>
        <remove>
          <evidence type="vendor" source="Manifest" name="Implementation-Vendor"
                    value="SpringSource"/>
        </remove>
      </hint>
      <vendorDuplicatingHint value="apache software foundation" duplicate="apache"/>
    </hints>

An XML namespace on the elements is accepted and ignored. The version
attribute is optional; when present its major version must be 1.

Provides:
- HintParser: Parses rule files into a HintRuleSet
"""

import re
import xml.etree.ElementTree as ET
from pathlib import Path

import structlog

from depident.core.errors import HintParseError
from depident.core.evidence import Confidence, Evidence

from .rules import HintRule, HintRuleSet, PropertyType, VendorDuplicatingHintRule

logger = structlog.get_logger()

SUPPORTED_MAJOR_VERSION = "1"

_EVIDENCE_TYPES = ("vendor", "product", "version")


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _parse_bool(text: str | None, default: bool) -> bool:
    if text is None:
        return default
    return text.strip().lower() in ("true", "1", "yes")


class HintParser:
    """Parses hint rule XML into HintRule and VendorDuplicatingHintRule objects."""

    def parse_file(self, path: str | Path) -> HintRuleSet:
        """Parse a rule file from disk.

        Raises:
            HintParseError: If the file cannot be read or is malformed
        """
        try:
            data = Path(path).read_bytes()
        except OSError as e:
            raise HintParseError(f"Unable to read hint file '{path}': {e}") from e
        return self.parse_string(data, origin=str(path))

    def parse_string(self, data: str | bytes, origin: str = "<string>") -> HintRuleSet:
        """Parse rule XML from a string or bytes.

        Raises:
            HintParseError: If the XML is malformed or violates the format
        """
        try:
            root = ET.fromstring(data)
        except ET.ParseError as e:
            raise HintParseError(f"Error parsing hints from {origin}: {e}") from e

        if _local_name(root.tag) != "hints":
            raise HintParseError(f"Unexpected root element <{_local_name(root.tag)}> in {origin}")

        version = root.get("version")
        if version is not None and version.split(".", 1)[0] != SUPPORTED_MAJOR_VERSION:
            raise HintParseError(f"Unsupported hint file version {version} in {origin}")

        hints = []
        vendor_hints = []
        for element in root:
            name = _local_name(element.tag)
            if name == "hint":
                hints.append(self._parse_hint(element, origin))
            elif name == "vendorDuplicatingHint":
                vendor_hints.append(self._parse_vendor_duplicating_hint(element, origin))
            else:
                raise HintParseError(f"Unexpected element <{name}> in {origin}")

        logger.debug("hints_parsed", origin=origin, hints=len(hints), vendor_hints=len(vendor_hints))
        return HintRuleSet(hints=tuple(hints), vendor_duplicating_hints=tuple(vendor_hints))

    def _parse_hint(self, element: ET.Element, origin: str) -> HintRule:
        rule = HintRule()
        for section in element:
            section_name = _local_name(section.tag)
            if section_name not in ("given", "add", "remove"):
                raise HintParseError(f"Unexpected element <{section_name}> in hint ({origin})")
            for child in section:
                child_name = _local_name(child.tag)
                if child_name == "fileName" and section_name == "given":
                    rule.filenames.append(self._parse_filename(child, origin))
                elif child_name == "evidence":
                    evidence_type, evidence = self._parse_evidence(child, origin)
                    getattr(rule, f"{section_name}_{evidence_type}").append(evidence)
                else:
                    raise HintParseError(
                        f"Unexpected element <{child_name}> in <{section_name}> ({origin})"
                    )
        return rule

    def _parse_evidence(self, element: ET.Element, origin: str) -> tuple[str, Evidence]:
        attrs = element.attrib
        missing = [key for key in ("type", "source", "name", "value") if key not in attrs]
        if missing:
            raise HintParseError(f"Evidence missing attribute(s) {', '.join(missing)} ({origin})")

        evidence_type = attrs["type"].strip().lower()
        if evidence_type not in _EVIDENCE_TYPES:
            raise HintParseError(f"Invalid evidence type '{attrs['type']}' ({origin})")

        try:
            confidence = Confidence.parse(attrs.get("confidence", Confidence.MEDIUM.value))
        except ValueError as e:
            raise HintParseError(f"{e} ({origin})") from e

        evidence = Evidence(
            source=attrs["source"],
            name=attrs["name"],
            value=attrs["value"],
            confidence=confidence,
        )
        return evidence_type, evidence

    def _parse_filename(self, element: ET.Element, origin: str) -> PropertyType:
        value = element.get("contains")
        if value is None:
            raise HintParseError(f"fileName missing 'contains' attribute ({origin})")
        regex = _parse_bool(element.get("regex"), False)
        if regex:
            try:
                re.compile(value)
            except re.error as e:
                raise HintParseError(f"Invalid fileName regex '{value}': {e} ({origin})") from e
        return PropertyType(
            value=value,
            regex=regex,
            case_sensitive=_parse_bool(element.get("caseSensitive"), False),
        )

    def _parse_vendor_duplicating_hint(
        self, element: ET.Element, origin: str
    ) -> VendorDuplicatingHintRule:
        value = element.get("value")
        duplicate = element.get("duplicate")
        if not value or not duplicate:
            raise HintParseError(
                f"vendorDuplicatingHint requires 'value' and 'duplicate' ({origin})"
            )
        return VendorDuplicatingHintRule(value=value, duplicate=duplicate)
