"""
Handles the low-level downloading of single assets over HTTP.
"""

import asyncio
import logging
import os
import uuid

import aiofiles
import aiohttp

from coub_archiver.exceptions import AssetFetchError
from coub_archiver.models.stats import ArchiveStats

log = logging.getLogger(__name__)

CHUNK_SIZE = 262144  # 256 KB


def create_session(
    max_workers: int = 5, connect_timeout: float = 15, read_timeout: float = 90
) -> aiohttp.ClientSession:
    """
    Creates the aiohttp ClientSession shared by every fetch of a run.

    Args:
        max_workers: Maximum concurrent clips (should match config.max_workers).
    """
    connector = aiohttp.TCPConnector(
        # Up to three groups per clip fetch at once
        limit=max_workers * 3,
        ttl_dns_cache=600,
        keepalive_timeout=30,
        enable_cleanup_closed=True,
    )
    timeout = aiohttp.ClientTimeout(
        total=None, sock_connect=connect_timeout, sock_read=read_timeout
    )
    log.debug(f"Created download session with limit={max_workers * 3}")
    return aiohttp.ClientSession(connector=connector, timeout=timeout)


class AssetFetcher:
    """Fetches one URL into one file, overwriting it, with retry on transport errors."""

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        max_attempts: int = 3,
        base_delay: float = 1.5,
        stats: ArchiveStats | None = None,
        max_workers: int = 5,
        connect_timeout: float = 15,
        read_timeout: float = 90,
    ):
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.stats = stats
        self._session = session
        self._owns_session = session is None
        self._session_args = (max_workers, connect_timeout, read_timeout)

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = create_session(*self._session_args)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Closes the session if this fetcher created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
            log.debug("Downloader session closed.")

    async def __aenter__(self) -> "AssetFetcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def fetch(self, destination_path: str, url: str) -> int:
        """
        Downloads `url` to `destination_path`, replacing any existing file.

        Returns:
            The number of bytes written.

        Raises:
            AssetFetchError: On transport failure, non-success status or a
            filesystem error.
        """
        if not url:
            raise AssetFetchError(url, destination_path, "empty URL")

        # Short sibling name; the final name may already use the full length budget
        temp_path = os.path.join(
            os.path.dirname(destination_path), f".{uuid.uuid4().hex}.part"
        )
        last_exception: BaseException | None = None
        try:
            for attempt in range(1, self.max_attempts + 1):
                try:
                    size = await self._fetch_once(url, temp_path)
                    os.replace(temp_path, destination_path)
                    if self.stats:
                        await self.stats.add_bytes(size)
                    return size
                except aiohttp.ClientResponseError as e:
                    # A 4xx will not improve on retry
                    if e.status < 500 and e.status != 429:
                        raise AssetFetchError(url, destination_path, e) from e
                    last_exception = e
                except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                    last_exception = e
                except OSError as e:
                    raise AssetFetchError(url, destination_path, e) from e

                log.debug(
                    f"Download attempt {attempt}/{self.max_attempts} for "
                    f"'{os.path.basename(destination_path)}' failed: "
                    f"{last_exception!r}. Retrying..."
                )
                if attempt < self.max_attempts:
                    await asyncio.sleep(self.base_delay * (2 ** (attempt - 1)))
        finally:
            if os.path.exists(temp_path):
                try:
                    os.remove(temp_path)
                except OSError:
                    log.debug(f"Could not remove partial file '{temp_path}'")

        raise AssetFetchError(
            url, destination_path, last_exception or "unknown error"
        ) from last_exception

    async def _fetch_once(self, url: str, temp_path: str) -> int:
        async with self.session.get(url, allow_redirects=True) as response:
            response.raise_for_status()
            bytes_downloaded = 0
            async with aiofiles.open(temp_path, "wb") as f:
                async for chunk in response.content.iter_chunked(CHUNK_SIZE):
                    await f.write(chunk)
                    bytes_downloaded += len(chunk)
            return bytes_downloaded
