"""Like coordination between the record store, the backlink index and the cache.

The backlink index is the source of truth for like counts but lags newly
written records by several seconds. Right after a like or unlike the cache is
updated optimistically, and the record just written is remembered as a shadow
record so an immediate unlike does not depend on the index having caught up.
Cached values expire after ``cache_ttl_seconds`` and are then recomputed from
the index.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import AsyncIterator, Callable, Dict, List, Optional

from ...providers.exceptions import RecordStoreError, TransientIndexError
from ..entities import PackageLikes, RecordRef
from ..exceptions import MalformedRecordIdentifierError
from ..interfaces import BacklinkIndex, CacheStore, RecordStore
from ..subject import package_subject_ref

logger = logging.getLogger(__name__)

LIKE_COLLECTION = "dev.npmx.feed.like"
LIKE_PATH_FIELD = ".subjectRef"
DEFAULT_CACHE_TTL_SECONDS = 300

CACHE_PREFIX = "likes"


def total_likes_key(package_name: str) -> str:
    return f"{CACHE_PREFIX}:{package_name}:total"


def user_liked_key(package_name: str, did: str) -> str:
    return f"{CACHE_PREFIX}:{package_name}:users:{did}:liked"


def shadow_record_key(package_name: str, did: str) -> str:
    return f"{CACHE_PREFIX}:{package_name}:users:{did}:shadow"


@dataclass
class _LockEntry:
    """Write lock for one (package, caller) and the number of tasks holding or awaiting it."""

    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    waiters: int = 0


class LikeCoordinator:
    """Produces like views for packages and performs like/unlike transitions."""

    def __init__(
        self,
        cache: CacheStore,
        index: BacklinkIndex,
        record_store: RecordStore,
        collection: str = LIKE_COLLECTION,
        path_field: str = LIKE_PATH_FIELD,
        subject_ref: Callable[[str], str] = package_subject_ref,
        cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS,
        serialize_writes: bool = True,
    ):
        """
        Initialize the like coordinator.

        Args:
            cache: Cache shared by every request (and process, when remote)
            index: Backlink index used as the source of truth
            record_store: Store that writes like records to the caller's repository
            collection: Collection like records are written to
            path_field: Field of the like record holding the subject reference
            subject_ref: Maps a package name to its subject reference
            cache_ttl_seconds: TTL for every cache entry written here
            serialize_writes: Serialize like/unlike per (package, caller) in this process
        """
        self.cache = cache
        self.index = index
        self.record_store = record_store
        self.collection = collection
        self.path_field = path_field
        self.subject_ref = subject_ref
        self.cache_ttl_seconds = cache_ttl_seconds
        self.serialize_writes = serialize_writes
        self._locks: Dict[str, _LockEntry] = {}

    @staticmethod
    def _validate(package_name: str, caller_id: Optional[str] = None, require_caller: bool = False) -> None:
        if not package_name or not package_name.strip():
            raise ValueError("Package name cannot be empty")
        if require_caller and (not caller_id or not caller_id.strip()):
            raise ValueError("Caller DID is required")

    @asynccontextmanager
    async def _write_lock(self, package_name: str, caller_id: str) -> AsyncIterator[None]:
        """Serialize writes for one caller on one package within this process."""
        if not self.serialize_writes:
            yield
            return

        key = f"{package_name}:{caller_id}"
        entry = self._locks.setdefault(key, _LockEntry())
        entry.waiters += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.waiters -= 1
            if entry.waiters == 0:
                self._locks.pop(key, None)

    async def _index_total(self, package_name: str) -> int:
        """Get the true like count for a package from the index."""
        return await self.index.count_distinct_writers(
            self.subject_ref(package_name), self.collection, self.path_field
        )

    async def _index_user_records(self, package_name: str, caller_id: str) -> List[RecordRef]:
        """Get the caller's like records for a package from the index."""
        return await self.index.find_writer_records(
            self.subject_ref(package_name),
            self.collection,
            self.path_field,
            [caller_id],
        )

    async def _cached_total(self, package_name: str) -> Optional[int]:
        value = await self.cache.get(total_likes_key(package_name))
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            return None
        return value

    async def _current_total(self, package_name: str) -> int:
        """
        Get the like count from cache, falling back to the index.

        Raises:
            TransientIndexError: If the count is not cached and the index fails
        """
        cached = await self._cached_total(package_name)
        if cached is not None:
            logger.debug(f"Like total cache hit for {package_name}")
            return cached

        logger.debug(f"Like total cache miss for {package_name}")
        total = await self._index_total(package_name)
        await self.cache.set(total_likes_key(package_name), total, self.cache_ttl_seconds)
        return total

    async def _get_shadow_record(self, package_name: str, caller_id: str) -> Optional[RecordRef]:
        data = await self.cache.get(shadow_record_key(package_name, caller_id))
        if not data:
            return None
        try:
            return RecordRef.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Ignoring unreadable shadow record for {caller_id} on {package_name}: {e}")
            return None

    async def has_user_liked(self, package_name: str, caller_id: str) -> bool:
        """
        Get the definite answer whether the caller has liked a package.

        Checks the cache, then a shadow record, then the index.

        Raises:
            TransientIndexError: If the answer is not cached and the index fails
        """
        key = user_liked_key(package_name, caller_id)
        cached = await self.cache.get(key)
        if isinstance(cached, bool):
            return cached

        if await self._get_shadow_record(package_name, caller_id) is not None:
            liked = True
        else:
            liked = len(await self._index_user_records(package_name, caller_id)) > 0

        await self.cache.set(key, liked, self.cache_ttl_seconds)
        return liked

    async def get_status(self, package_name: str, caller_id: Optional[str] = None) -> PackageLikes:
        """
        Get the likes for a package, and whether the caller has liked it.

        Never fails on index errors: an unavailable count reads as 0 and an
        unavailable per-user answer reads as not liked. Neither fallback is cached.

        Args:
            package_name: Package to look up
            caller_id: DID of the logged in caller, if any

        Returns:
            PackageLikes view
        """
        self._validate(package_name)

        try:
            total = await self._current_total(package_name)
        except TransientIndexError as e:
            logger.warning(f"Index unavailable counting likes for {package_name}, reporting 0: {e}")
            total = 0

        user_has_liked = False
        if caller_id:
            try:
                user_has_liked = await self.has_user_liked(package_name, caller_id)
            except TransientIndexError as e:
                logger.warning(
                    f"Index unavailable checking like by {caller_id} on {package_name}, reporting not liked: {e}"
                )

        return PackageLikes(
            package_name=package_name,
            total_likes=total,
            user_has_liked=user_has_liked,
        )

    async def find_user_like_record(self, package_name: str, caller_id: str) -> Optional[RecordRef]:
        """
        Find the record the caller liked the package with.

        The shadow record is used when present; otherwise the index is asked.

        Raises:
            TransientIndexError: If there is no shadow record and the index fails
        """
        shadow = await self._get_shadow_record(package_name, caller_id)
        if shadow is not None:
            return shadow

        records = await self._index_user_records(package_name, caller_id)
        if records:
            return records[0]
        return None

    def _build_like_record(self, package_name: str) -> Dict[str, str]:
        return {
            "$type": self.collection,
            self.path_field.strip("."): self.subject_ref(package_name),
            "createdAt": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        }

    async def like(self, package_name: str, caller_id: str) -> PackageLikes:
        """
        Like a package for the caller. Liking an already liked package is a no-op.

        Args:
            package_name: Package to like
            caller_id: DID of the authenticated caller

        Returns:
            Updated PackageLikes view

        Raises:
            TransientIndexError: If the index is needed and unavailable (nothing is written)
            RecordStoreError: If the like record could not be written (caches untouched)
            MalformedRecordIdentifierError: If the written record's URI is unusable
        """
        self._validate(package_name, caller_id, require_caller=True)

        async with self._write_lock(package_name, caller_id):
            total = await self._current_total(package_name)
            if await self.has_user_liked(package_name, caller_id):
                logger.debug(f"User {caller_id} already liked {package_name}")
                return PackageLikes(package_name=package_name, total_likes=total, user_has_liked=True)

            try:
                uri = await self.record_store.create_record(
                    caller_id, self.collection, self._build_like_record(package_name)
                )
            except RecordStoreError as e:
                logger.error(f"Failed to write like by {caller_id} on {package_name}: {e}")
                raise

            try:
                backlink = RecordRef.from_uri(uri)
            except MalformedRecordIdentifierError:
                logger.error(f"Like by {caller_id} on {package_name} returned unusable URI {uri!r}")
                raise

            # The index takes a few seconds to pick up new records
            await self.cache.set(
                shadow_record_key(package_name, caller_id),
                backlink.to_dict(),
                self.cache_ttl_seconds,
            )
            await self.cache.set(user_liked_key(package_name, caller_id), True, self.cache_ttl_seconds)

            cached = await self._cached_total(package_name)
            total = (cached if cached is not None else total) + 1
            await self.cache.set(total_likes_key(package_name), total, self.cache_ttl_seconds)

            logger.info(f"User {caller_id} liked {package_name} ({backlink.uri})")
            return PackageLikes(package_name=package_name, total_likes=total, user_has_liked=True)

    async def unlike(self, package_name: str, caller_id: str) -> PackageLikes:
        """
        Remove the caller's like from a package. Unliking a package that is not
        liked is a no-op.

        Args:
            package_name: Package to unlike
            caller_id: DID of the authenticated caller

        Returns:
            Updated PackageLikes view

        Raises:
            TransientIndexError: If there is no shadow record and the index is
                unavailable (nothing is deleted)
            RecordStoreError: If the like record could not be deleted (caches untouched)
        """
        self._validate(package_name, caller_id, require_caller=True)

        async with self._write_lock(package_name, caller_id):
            record = await self.find_user_like_record(package_name, caller_id)
            if record is None:
                logger.warning(
                    f"User {caller_id} tried to unlike package {package_name} but it was not liked by them"
                )
                return await self.get_status(package_name, caller_id)

            try:
                await self.record_store.delete_record(caller_id, record.collection, record.rkey)
            except RecordStoreError as e:
                logger.error(f"Failed to delete like {record.uri} by {caller_id}: {e}")
                raise

            await self.cache.delete(shadow_record_key(package_name, caller_id))
            await self.cache.set(user_liked_key(package_name, caller_id), False, self.cache_ttl_seconds)

            # The index still counts the deleted record, so its total is decremented too
            try:
                total = max(await self._current_total(package_name) - 1, 0)
            except TransientIndexError as e:
                logger.warning(
                    f"Index unavailable counting likes for {package_name} after unlike, reporting 0: {e}"
                )
                await self.cache.delete(total_likes_key(package_name))
                total = 0
            else:
                await self.cache.set(total_likes_key(package_name), total, self.cache_ttl_seconds)

            logger.info(f"User {caller_id} unliked {package_name} ({record.uri})")
            return PackageLikes(package_name=package_name, total_likes=total, user_has_liked=False)
