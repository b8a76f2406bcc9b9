"""Load the built-in hint rules and the optional external hint file.

The built-in rule set ships as package data and is always parsed first;
a malformed built-in file is fatal. When settings.hints_file is set it
is resolved, in order, as:

1. a URL (http, https or file scheme), downloaded to a temp file. A
   failed fetch is retried once in relaxed mode (through the configured
   proxy) before giving up;
2. a local filesystem path;
3. the name of a resource shipped in depident/hints/data, copied to a
   temp file.

External rules only extend the built-in set. Temp files are removed
after parsing whether or not parsing succeeded.

Provides:
- load_hint_rules: Resolve and parse all hint rules for a Settings instance
- load_builtin_rules: Parse the built-in rule set only
"""

import os
import re
import tempfile
from contextlib import contextmanager
from importlib import resources
from pathlib import Path

import structlog

from depident.core.config import Settings
from depident.core.download import Downloader
from depident.core.errors import DownloadFailedError, HintParseError

from .parser import HintParser
from .rules import HintRuleSet

logger = structlog.get_logger()

BASE_HINT_RULE_FILE = "base_hints.xml"

_URI_PATTERN = re.compile(r"^(https?|file):.*", re.IGNORECASE)


def _data_resource(name: str):
    return resources.files("depident.hints").joinpath("data").joinpath(name)


def load_builtin_rules(parser: HintParser | None = None) -> HintRuleSet:
    """Parse the built-in rule set.

    Raises:
        HintParseError: If the built-in rule file is missing or malformed
    """
    parser = parser or HintParser()
    resource = _data_resource(BASE_HINT_RULE_FILE)
    try:
        data = resource.read_bytes()
    except OSError as e:
        raise HintParseError(f"Unable to read built-in hint rules: {e}") from e
    return parser.parse_string(data, origin=BASE_HINT_RULE_FILE)


@contextmanager
def _temp_file(settings: Settings):
    """Yield a temp file path that is removed on exit, logging removal failures."""
    fd, name = tempfile.mkstemp(prefix="hint", suffix=".xml", dir=settings.temp_directory)
    os.close(fd)
    path = Path(name)
    try:
        yield path
    finally:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("temp_file_cleanup_failed", path=str(path), error=str(e))


async def _fetch_with_retry(downloader: Downloader, url: str, destination: Path) -> None:
    try:
        await downloader.fetch_file(url, destination, use_proxy=False)
    except DownloadFailedError as e:
        logger.warning("hint_download_retry", url=url, error=str(e))
        await downloader.fetch_file(url, destination, use_proxy=True)


async def _load_external_rules(
    settings: Settings, parser: HintParser, downloader: Downloader
) -> HintRuleSet:
    location = settings.hints_file
    log = logger.bind(hints_file=location)

    if _URI_PATTERN.match(location):
        with _temp_file(settings) as path:
            try:
                await _fetch_with_retry(downloader, location, path)
            except DownloadFailedError as e:
                raise HintParseError("Unable to fetch the configured hint file") from e
            return _parse_external(parser, path, log)

    local = Path(location)
    if local.exists():
        return _parse_external(parser, local, log)

    resource = _data_resource(location)
    if resource.is_file():
        with _temp_file(settings) as path:
            try:
                path.write_bytes(resource.read_bytes())
            except OSError as e:
                raise HintParseError("Unable to locate hints file in package resources") from e
            return _parse_external(parser, path, log)

    raise HintParseError(f"Configured hint file '{location}' could not be found")


def _parse_external(parser: HintParser, path: Path, log) -> HintRuleSet:
    try:
        return parser.parse_file(path)
    except HintParseError as e:
        log.warning("hint_file_parse_failed", path=str(path), error=str(e))
        raise


async def load_hint_rules(
    settings: Settings,
    parser: HintParser | None = None,
    downloader: Downloader | None = None,
) -> HintRuleSet:
    """Load built-in rules and, when configured, the external hint file.

    Args:
        settings: Engine settings (hints_file, proxy, temp directory)
        parser: Parser to use (default: new HintParser)
        downloader: Downloader to use for URLs (default: Downloader(settings))

    Returns:
        Combined HintRuleSet (built-in rules first)

    Raises:
        HintParseError: If any rule data is malformed or cannot be resolved
    """
    parser = parser or HintParser()
    rules = load_builtin_rules(parser)

    if settings.hints_file:
        downloader = downloader or Downloader(settings)
        rules = rules.extend(await _load_external_rules(settings, parser, downloader))

    logger.debug(
        "hint_rules_loaded",
        hints=len(rules.hints),
        vendor_duplicating_hints=len(rules.vendor_duplicating_hints),
    )
    return rules
