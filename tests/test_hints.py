"""Tests for hint rule parsing, loading and application."""

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from depident.analyzers.hint import HintAnalyzer, apply_hints
from depident.core.config import Settings
from depident.core.dependency import Dependency
from depident.core.errors import DownloadFailedError, HintParseError, InitializationError
from depident.core.evidence import Confidence, Evidence
from depident.hints import (
    HintParser,
    HintRule,
    HintRuleSet,
    PropertyType,
    VendorDuplicatingHintRule,
    load_builtin_rules,
    load_hint_rules,
)


EXTERNAL_HINTS = """<?xml version="1.0"?>
<hints version="1.1">
  <hint>
    <given>
      <fileName contains="acme-widget.jar"/>
    </given>
    <add>
      <evidence type="vendor" source="hint analyzer" name="vendor" value="acme" confidence="HIGHEST"/>
    </add>
  </hint>
  <vendorDuplicatingHint value="acme corp" duplicate="acme"/>
</hints>
"""

NAMESPACED_HINTS = """<?xml version="1.0"?>
<hints xmlns="https://example.org/dependency-hint.1.1.xsd">
  <hint>
    <given>
      <evidence type="product" source="Manifest" name="title" value="widget"/>
    </given>
    <remove>
      <evidence type="product" source="Manifest" name="title" value="widget"/>
    </remove>
  </hint>
</hints>
"""


def _settings(tmp_path: Path, **overrides) -> Settings:
    values = {
        "hints_file": None,
        "proxy_server": None,
        "temp_directory": str(tmp_path),
    }
    values.update(overrides)
    return Settings(**values)


def _virtual(file_path: str = "/lib/foo.jar") -> Dependency:
    return Dependency(file_path=file_path, is_virtual=True)


# apply_hints


def test_hint_replaces_vendor_when_product_matches():
    """Test givenProduct=foo, removeVendor=bar, addVendor=baz."""
    rule = HintRule(
        given_product=[Evidence(source="s", name="n", value="foo")],
        remove_vendor=[Evidence(source="s", name="n", value="bar")],
        add_vendor=[Evidence(source="s", name="n", value="baz", confidence=Confidence.HIGH)],
    )
    dependency = _virtual()
    dependency.product_evidence.add_evidence("s", "n", "foo")
    dependency.vendor_evidence.add_evidence("s", "n", "bar")

    apply_hints(dependency, [rule], [])

    values = [e.value for e in dependency.vendor_evidence]
    assert "bar" not in values
    assert "baz" in values


def test_hint_fires_on_any_single_given():
    """Test that one matching version given fires the rule even if vendor givens miss."""
    rule = HintRule(
        given_vendor=[Evidence(source="s", name="n", value="nobody")],
        given_version=[Evidence(source="s", name="n", value="1.0")],
        add_product=[Evidence(source="hint", name="product", value="widget")],
    )
    dependency = _virtual()
    dependency.version_evidence.add_evidence("s", "n", "1.0")

    apply_hints(dependency, [rule], [])

    assert Evidence(source="hint", name="product", value="widget") in dependency.product_evidence


def test_hint_fires_on_filename_pattern():
    rule = HintRule(
        filenames=[PropertyType(value=r"struts2-core-.*\.jar", regex=True)],
        add_vendor=[Evidence(source="hint", name="vendor", value="apache")],
    )
    dependency = _virtual("/lib/Struts2-Core-2.5.jar")

    apply_hints(dependency, [rule], [])

    assert [e.value for e in dependency.vendor_evidence] == ["apache"]


def test_hint_does_not_fire_without_match():
    rule = HintRule(
        given_product=[Evidence(source="s", name="n", value="foo")],
        add_vendor=[Evidence(source="hint", name="vendor", value="acme")],
    )
    dependency = _virtual()
    dependency.product_evidence.add_evidence("s", "n", "bar")

    apply_hints(dependency, [rule], [])

    assert len(dependency.vendor_evidence) == 0


def test_hint_add_is_idempotent():
    rule = HintRule(
        filenames=[PropertyType(value="foo.jar")],
        add_vendor=[Evidence(source="hint", name="vendor", value="acme")],
    )
    dependency = _virtual()

    apply_hints(dependency, [rule], [])
    apply_hints(dependency, [rule], [])

    assert len(dependency.vendor_evidence) == 1


def test_hint_add_raises_confidence_of_present_evidence():
    rule = HintRule(
        filenames=[PropertyType(value="foo.jar")],
        add_vendor=[Evidence(source="manifest", name="vendor", value="acme", confidence=Confidence.HIGHEST)],
    )
    dependency = _virtual()
    dependency.vendor_evidence.add_evidence("Manifest", "vendor", "acme", Confidence.LOW)

    apply_hints(dependency, [rule], [])

    assert [e.confidence for e in dependency.vendor_evidence] == [Confidence.HIGHEST]


def test_vendor_duplicating_hint():
    """Test that a matching vendor gets a duplicate added and keeps the original."""
    dependency = _virtual()
    dependency.vendor_evidence.add_evidence(
        "Manifest", "Implementation-Vendor", "Apache Software Foundation", Confidence.HIGH
    )
    vendor_rules = [VendorDuplicatingHintRule(value="apache software foundation", duplicate="apache")]

    apply_hints(dependency, [], vendor_rules)

    evidence = list(dependency.vendor_evidence)
    assert len(evidence) == 2
    assert evidence[0].value == "Apache Software Foundation"
    duplicate = evidence[1]
    assert duplicate.value == "apache"
    assert duplicate.source == "Manifest (hint)"
    assert duplicate.name == "Implementation-Vendor"
    assert duplicate.confidence == Confidence.HIGH


def test_vendor_duplicates_do_not_retrigger():
    """Test that sun->oracle and oracle->sun produce a single extra entry."""
    dependency = _virtual()
    dependency.vendor_evidence.add_evidence("Manifest", "vendor", "sun", Confidence.MEDIUM)
    vendor_rules = [
        VendorDuplicatingHintRule(value="sun", duplicate="oracle"),
        VendorDuplicatingHintRule(value="oracle", duplicate="sun"),
    ]

    apply_hints(dependency, [], vendor_rules)

    assert [e.value for e in dependency.vendor_evidence] == ["sun", "oracle"]


# PropertyType


def test_property_type_matching():
    assert PropertyType(value="Foo.jar").matches("foo.jar")
    assert not PropertyType(value="Foo.jar", case_sensitive=True).matches("foo.jar")
    assert PropertyType(value=r"foo-\d+\.jar", regex=True).matches("FOO-12.jar")
    assert not PropertyType(value=r"foo-\d+\.jar", regex=True, case_sensitive=True).matches("FOO-12.jar")
    assert not PropertyType(value="foo.jar").matches(None)


# HintParser


def test_parser_reads_rules():
    rules = HintParser().parse_string(EXTERNAL_HINTS)

    assert len(rules.hints) == 1
    hint = rules.hints[0]
    assert hint.filenames == [PropertyType(value="acme-widget.jar")]
    assert hint.add_vendor[0].value == "acme"
    assert hint.add_vendor[0].confidence == Confidence.HIGHEST
    assert rules.vendor_duplicating_hints == (VendorDuplicatingHintRule("acme corp", "acme"),)


def test_parser_accepts_namespace():
    rules = HintParser().parse_string(NAMESPACED_HINTS)

    assert len(rules.hints) == 1
    assert rules.hints[0].given_product[0].value == "widget"
    assert rules.hints[0].remove_product[0].value == "widget"


@pytest.mark.parametrize(
    "xml",
    [
        "<hints><hint>",
        "<rules/>",
        '<hints version="2.0"/>',
        '<hints><hint><given><evidence type="vendor" source="s" name="n"/></given></hint></hints>',
        '<hints><hint><given><evidence type="license" source="s" name="n" value="v"/></given></hint></hints>',
        '<hints><hint><add><evidence type="vendor" source="s" name="n" value="v" confidence="sure"/></add></hint></hints>',
        '<hints><hint><given><fileName contains="[" regex="true"/></given></hint></hints>',
        '<hints><vendorDuplicatingHint value="x"/></hints>',
    ],
)
def test_parser_rejects_malformed_rules(xml):
    with pytest.raises(HintParseError):
        HintParser().parse_string(xml)


def test_builtin_rules_parse():
    rules = load_builtin_rules()

    assert len(rules.hints) > 0
    assert VendorDuplicatingHintRule("apache software foundation", "apache") in rules.vendor_duplicating_hints


# load_hint_rules


@pytest.mark.asyncio
async def test_load_without_external_file(tmp_path):
    rules = await load_hint_rules(_settings(tmp_path))

    assert rules == load_builtin_rules()


@pytest.mark.asyncio
async def test_load_local_file_extends_builtin(tmp_path):
    hints_file = tmp_path / "extra-hints.xml"
    hints_file.write_text(EXTERNAL_HINTS)
    builtin = load_builtin_rules()

    rules = await load_hint_rules(_settings(tmp_path, hints_file=str(hints_file)))

    assert len(rules.hints) == len(builtin.hints) + 1
    assert rules.hints[: len(builtin.hints)] == builtin.hints
    assert rules.vendor_duplicating_hints[-1] == VendorDuplicatingHintRule("acme corp", "acme")


@pytest.mark.asyncio
async def test_load_packaged_resource(tmp_path):
    """Test that a resource name resolves to the packaged copy and its temp file is removed."""
    work = tmp_path / "work"
    work.mkdir()

    rules = await load_hint_rules(_settings(work, hints_file="base_hints.xml"))

    builtin = load_builtin_rules()
    assert len(rules.hints) == 2 * len(builtin.hints)
    assert list(work.iterdir()) == []


@pytest.mark.asyncio
async def test_load_missing_file_fails(tmp_path):
    with pytest.raises(HintParseError):
        await load_hint_rules(_settings(tmp_path, hints_file=str(tmp_path / "nope.xml")))


@pytest.mark.asyncio
async def test_load_malformed_external_file_fails(tmp_path):
    hints_file = tmp_path / "broken.xml"
    hints_file.write_text("<hints><hint>")

    with pytest.raises(HintParseError):
        await load_hint_rules(_settings(tmp_path, hints_file=str(hints_file)))


@pytest.mark.asyncio
async def test_load_url_downloads_and_cleans_up(tmp_path):
    work = tmp_path / "work"
    work.mkdir()
    seen = []

    async def fake_fetch(url, destination, use_proxy=False):
        seen.append((url, use_proxy))
        Path(destination).write_text(EXTERNAL_HINTS)

    downloader = AsyncMock()
    downloader.fetch_file = AsyncMock(side_effect=fake_fetch)

    rules = await load_hint_rules(
        _settings(work, hints_file="https://example.com/hints.xml"), downloader=downloader
    )

    assert seen == [("https://example.com/hints.xml", False)]
    assert rules.vendor_duplicating_hints[-1] == VendorDuplicatingHintRule("acme corp", "acme")
    assert list(work.iterdir()) == []


@pytest.mark.asyncio
async def test_load_url_retries_once_in_relaxed_mode(tmp_path):
    work = tmp_path / "work"
    work.mkdir()
    calls = []

    async def flaky_fetch(url, destination, use_proxy=False):
        calls.append(use_proxy)
        if not use_proxy:
            raise DownloadFailedError("connection reset")
        Path(destination).write_text(EXTERNAL_HINTS)

    downloader = AsyncMock()
    downloader.fetch_file = AsyncMock(side_effect=flaky_fetch)

    rules = await load_hint_rules(
        _settings(work, hints_file="HTTPS://example.com/hints.xml"), downloader=downloader
    )

    assert calls == [False, True]
    assert len(rules.hints) == len(load_builtin_rules().hints) + 1
    assert list(work.iterdir()) == []


@pytest.mark.asyncio
async def test_load_url_gives_up_after_retry(tmp_path):
    work = tmp_path / "work"
    work.mkdir()
    downloader = AsyncMock()
    downloader.fetch_file = AsyncMock(side_effect=DownloadFailedError("unreachable"))

    with pytest.raises(HintParseError):
        await load_hint_rules(
            _settings(work, hints_file="http://example.com/hints.xml"), downloader=downloader
        )

    assert downloader.fetch_file.await_count == 2
    assert list(work.iterdir()) == []


@pytest.mark.asyncio
async def test_load_url_parse_failure_cleans_up(tmp_path):
    work = tmp_path / "work"
    work.mkdir()

    async def bad_fetch(url, destination, use_proxy=False):
        Path(destination).write_text("<hints>")

    downloader = AsyncMock()
    downloader.fetch_file = AsyncMock(side_effect=bad_fetch)

    with pytest.raises(HintParseError):
        await load_hint_rules(
            _settings(work, hints_file="http://example.com/hints.xml"), downloader=downloader
        )

    assert list(work.iterdir()) == []


@pytest.mark.asyncio
async def test_temp_file_cleanup_failure_is_logged(tmp_path):
    """Test that a failing temp file removal does not mask the loaded rules."""
    work = tmp_path / "work"
    work.mkdir()

    async def fake_fetch(url, destination, use_proxy=False):
        Path(destination).write_text(EXTERNAL_HINTS)

    downloader = AsyncMock()
    downloader.fetch_file = AsyncMock(side_effect=fake_fetch)

    with patch("depident.hints.loader.Path.unlink", side_effect=PermissionError("locked")):
        rules = await load_hint_rules(
            _settings(work, hints_file="http://example.com/hints.xml"), downloader=downloader
        )

    assert rules.vendor_duplicating_hints[-1] == VendorDuplicatingHintRule("acme corp", "acme")


# HintAnalyzer


@pytest.mark.asyncio
async def test_hint_analyzer_initialization_failure(tmp_path):
    hints_file = tmp_path / "broken.xml"
    hints_file.write_text("not xml")
    analyzer = HintAnalyzer()

    with pytest.raises(InitializationError):
        await analyzer.initialize(_settings(tmp_path, hints_file=str(hints_file)))


@pytest.mark.asyncio
async def test_hint_analyzer_uses_given_rules(tmp_path):
    rules = HintRuleSet(
        hints=(
            HintRule(
                filenames=[PropertyType(value="foo.jar")],
                add_product=[Evidence(source="hint", name="product", value="foo")],
            ),
        )
    )
    analyzer = HintAnalyzer(rules=rules)
    await analyzer.initialize(_settings(tmp_path))
    dependency = _virtual()

    analyzer.analyze_dependency(dependency, engine=None)

    assert [e.value for e in dependency.product_evidence] == ["foo"]


@pytest.mark.asyncio
async def test_hint_analyzer_disabled(tmp_path):
    analyzer = HintAnalyzer()

    with patch("depident.analyzers.hint.load_hint_rules") as mock_load:
        await analyzer.initialize(_settings(tmp_path, analyzer_hint_enabled=False))

    assert analyzer.enabled is False
    mock_load.assert_not_called()
