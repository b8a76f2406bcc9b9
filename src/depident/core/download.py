"""Fetch remote files (used to resolve externally hosted hint rules).

Provides:
- Downloader: aiohttp based file fetcher honouring the proxy settings
"""

import shutil
from pathlib import Path
from urllib.parse import unquote, urlparse

import aiohttp
import structlog
from yarl import URL

from .config import Settings
from .errors import DownloadFailedError, TooManyRequestsError

logger = structlog.get_logger()

_CHUNK_SIZE = 65536


class Downloader:
    """Downloads a URL to a local file.

    Supports http, https and file URLs. Proxy use is decided per call so
    callers can retry a failed direct fetch through the configured proxy.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.log = logger.bind(component="downloader")

    async def fetch_file(self, url: str, destination: Path, use_proxy: bool = False) -> None:
        """Download url into destination.

        Args:
            url: Source URL (http, https or file scheme)
            destination: Local file to write; overwritten if present
            use_proxy: Route the request through settings.proxy_url when set

        Raises:
            TooManyRequestsError: If the server answers HTTP 429
            DownloadFailedError: On any other failure
        """
        parsed = urlparse(url)
        scheme = parsed.scheme.lower()
        destination = Path(destination)

        if scheme == "file":
            self._copy_local(parsed, destination)
            return
        if scheme not in ("http", "https"):
            raise DownloadFailedError(f"Unsupported URL scheme: {url}")

        proxy = self._proxy() if use_proxy else None

        timeout = aiohttp.ClientTimeout(total=self.settings.download_timeout)
        self.log.debug("download_start", url=url, use_proxy=bool(proxy))

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(
                    url, proxy=proxy, allow_redirects=True
                ) as response:
                    if response.status == 429:
                        raise TooManyRequestsError(f"Too many requests when fetching {url}")
                    if response.status != 200:
                        raise DownloadFailedError(
                            f"Unable to download {url}: HTTP {response.status}"
                        )
                    with open(destination, "wb") as fh:
                        async for chunk in response.content.iter_chunked(_CHUNK_SIZE):
                            fh.write(chunk)
        except DownloadFailedError:
            raise
        except (aiohttp.ClientError, TimeoutError, OSError) as e:
            raise DownloadFailedError(f"Unable to download {url}: {e}") from e

        self.log.debug("download_complete", url=url, destination=str(destination))

    def _copy_local(self, parsed, destination: Path) -> None:
        source = Path(unquote(parsed.path))
        try:
            shutil.copyfile(source, destination)
        except OSError as e:
            raise DownloadFailedError(f"Unable to copy {source}: {e}") from e

    def _proxy(self) -> str | None:
        """Configured proxy URL with any credentials embedded in its userinfo."""
        proxy = self.settings.proxy_url
        if proxy is None or not self.settings.proxy_username:
            return proxy
        url = URL(proxy).with_user(self.settings.proxy_username)
        url = url.with_password(self.settings.proxy_password or "")
        return str(url)
