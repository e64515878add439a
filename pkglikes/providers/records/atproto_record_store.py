"""AT Protocol record store using XRPC repo endpoints."""

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp
from aiohttp import ClientTimeout

from ... import __version__
from ...core.interfaces import RecordStore
from ..exceptions import RecordStoreError, WriteRejectedError

logger = logging.getLogger(__name__)


class AtprotoRecordStore(RecordStore):
    """Writes and deletes records on a PDS through com.atproto.repo.*.

    Writes are never retried here; a rejected or failed write is surfaced to
    the caller as-is.
    """

    def __init__(
        self,
        service_url: str,
        access_token: Optional[str] = None,
        timeout_seconds: float = 15,
    ):
        """
        Initialize AT Protocol record store.

        Args:
            service_url: PDS base URL
            access_token: Bearer token of the authenticated session
            timeout_seconds: Total timeout for a single request
        """
        self.service_url = service_url.rstrip("/")
        self.access_token = access_token
        self.timeout = ClientTimeout(total=timeout_seconds)
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session with authentication headers."""
        if self._session is None or self._session.closed:
            headers = {
                "Content-Type": "application/json",
                "User-Agent": f"pkglikes/{__version__}",
            }
            if self.access_token:
                headers["Authorization"] = f"Bearer {self.access_token}"
            self._session = aiohttp.ClientSession(timeout=self.timeout, headers=headers)
        return self._session

    async def _procedure(self, nsid: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """
        Call an XRPC procedure.

        Raises:
            WriteRejectedError: On a 4xx response
            RecordStoreError: On a 5xx response or network failure
        """
        session = await self._get_session()
        url = f"{self.service_url}/xrpc/{nsid}"

        try:
            async with session.post(url, json=body) as response:
                if 200 <= response.status < 300:
                    if response.content_type == "application/json":
                        return await response.json()
                    return {}

                text = await response.text()
                message = f"{nsid} failed with HTTP {response.status}: {text[:200]}"
                if 400 <= response.status < 500:
                    raise WriteRejectedError(message, status=response.status)
                raise RecordStoreError(message)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise RecordStoreError(f"{nsid} request failed: {e}") from e

    async def create_record(
        self, repo: str, collection: str, record: Dict[str, Any]
    ) -> str:
        data = await self._procedure(
            "com.atproto.repo.createRecord",
            {"repo": repo, "collection": collection, "record": record},
        )
        uri = data.get("uri")
        if not uri:
            raise RecordStoreError("createRecord response did not include a URI")
        logger.debug(f"Created record {uri}")
        return uri

    async def delete_record(self, repo: str, collection: str, rkey: str) -> None:
        await self._procedure(
            "com.atproto.repo.deleteRecord",
            {"repo": repo, "collection": collection, "rkey": rkey},
        )
        logger.debug(f"Deleted record at://{repo}/{collection}/{rkey}")

    async def health_check(self) -> bool:
        try:
            session = await self._get_session()
            async with session.get(
                f"{self.service_url}/xrpc/_health"
            ) as response:
                return response.status == 200
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"Record store health check failed: {e}")
            return False

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
