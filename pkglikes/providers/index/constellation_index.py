"""Constellation backlink index provider."""

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import aiohttp
from aiohttp import ClientTimeout

from ... import __version__
from ...core.entities import RecordRef
from ...core.interfaces import BacklinkIndex
from ..exceptions import TransientIndexError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://constellation.microcosm.blue"


class ConstellationIndex(BacklinkIndex):
    """Queries a Constellation instance for records linking to a subject."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 10,
        max_retries: int = 1,
        retry_delay: float = 0.5,
        records_limit: int = 16,
        user_agent: Optional[str] = None,
    ):
        """
        Initialize Constellation index provider.

        Args:
            base_url: Constellation base URL
            timeout_seconds: Total timeout for a single request
            max_retries: Extra attempts after a failed request
            retry_delay: Base delay between retries in seconds
            records_limit: Page size when listing a writer's records
            user_agent: User-Agent header sent with every request
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = ClientTimeout(total=timeout_seconds)
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.records_limit = records_limit
        self.user_agent = user_agent or f"pkglikes/{__version__}"
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=self.timeout,
                headers={"Accept": "application/json", "User-Agent": self.user_agent},
            )
        return self._session

    @staticmethod
    def _normalize_path(path_field: str) -> str:
        """Constellation paths are dotted from the record root."""
        return path_field if path_field.startswith(".") else f".{path_field}"

    async def _get_json(
        self, path: str, params: Sequence[Tuple[str, Any]]
    ) -> Dict[str, Any]:
        """
        Perform a GET request against the index with bounded retries.

        Args:
            path: Endpoint path
            params: Query parameters (repeated keys allowed)

        Returns:
            Decoded JSON body

        Raises:
            TransientIndexError: If every attempt fails
        """
        session = await self._get_session()
        url = f"{self.base_url}{path}"
        last_error = "no attempt made"

        for attempt in range(self.max_retries + 1):
            try:
                async with session.get(url, params=list(params)) as response:
                    if response.status == 200:
                        data = await response.json()
                        if not isinstance(data, dict):
                            raise TransientIndexError(
                                f"Unexpected response body from {path}"
                            )
                        return data

                    body = await response.text()
                    last_error = f"HTTP {response.status}: {body[:200]}"
                    # Client errors will not succeed on retry
                    if response.status < 500 and response.status != 429:
                        break
            except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
                last_error = str(e) or e.__class__.__name__

            if attempt < self.max_retries:
                logger.debug(
                    f"Index request {path} failed (attempt {attempt + 1}): {last_error}"
                )
                await asyncio.sleep(self.retry_delay * (attempt + 1))

        raise TransientIndexError(f"Backlink index query {path} failed: {last_error}")

    async def count_distinct_writers(
        self, subject_ref: str, collection: str, path_field: str
    ) -> int:
        logger.debug(f"Counting distinct writers for {subject_ref} in {collection}")

        # Limit does not affect the total, only the listed DIDs
        data = await self._get_json(
            "/links/distinct-dids",
            [
                ("target", subject_ref),
                ("collection", collection),
                ("path", self._normalize_path(path_field)),
                ("limit", 1),
            ],
        )

        total = data.get("total")
        if not isinstance(total, int) or total < 0:
            raise TransientIndexError(f"Invalid total in index response: {total!r}")
        return total

    async def find_writer_records(
        self,
        subject_ref: str,
        collection: str,
        path_field: str,
        writer_dids: Iterable[str],
    ) -> List[RecordRef]:
        dids = sorted(set(writer_dids))
        if not dids:
            return []

        logger.debug(f"Looking up records for {subject_ref} written by {dids}")

        params: List[Tuple[str, Any]] = [
            ("target", subject_ref),
            ("collection", collection),
            ("path", self._normalize_path(path_field)),
            ("limit", self.records_limit),
        ]
        params.extend(("did", did) for did in dids)

        data = await self._get_json("/links", params)

        records = []
        for item in data.get("linking_records") or []:
            try:
                records.append(
                    RecordRef(
                        did=item["did"],
                        collection=item["collection"],
                        rkey=item["rkey"],
                    )
                )
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed index record {item!r}: {e}")
        return records

    async def health_check(self) -> bool:
        try:
            session = await self._get_session()
            async with session.get(f"{self.base_url}/") as response:
                return response.status < 500
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"Constellation health check failed: {e}")
            return False

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
