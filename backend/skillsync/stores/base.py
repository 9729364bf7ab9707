"""
Shared machinery for the client-side entity stores.

Each store keeps an in-memory snapshot of one user's data, mirrors a
serializable slice of it into the ``PreferenceCache`` and synchronizes with a
``CollectionGateway``. Removals and updates are applied to memory first and
are not rolled back when the remote call fails; creates are applied only once
the remote row exists. Failed or unpersisted changes are recorded as pending
so the next ``load`` can report the drift it corrects.

Operations on the same entity are not serialized: whichever remote call
settles last decides the final in-memory state.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Generic, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from skillsync.core.config import settings
from skillsync.core.errors import RemoteStoreError
from skillsync.schemas.api import wire_key
from skillsync.services.gateway import CollectionGateway
from skillsync.services.preferences import PreferenceCache

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


@dataclass
class StoreState(Generic[T]):
    items: list[T] = field(default_factory=list)
    is_loading: bool = False
    error: str | None = None


@dataclass
class PendingChange:
    operation: str
    fields: dict[str, Any] = field(default_factory=dict)


class PersistedStore:
    """A store whose state survives restarts through the preference cache."""

    cache_key: str = ""

    def __init__(self, cache: PreferenceCache):
        self.cache = cache

    def snapshot(self) -> Any:
        raise NotImplementedError

    def restore(self, data: Any) -> None:
        raise NotImplementedError

    def hydrate(self) -> None:
        data = self.cache.get(self.cache_key)
        if data is None:
            return
        try:
            self.restore(data)
        except (PydanticValidationError, AttributeError, TypeError, ValueError, KeyError):
            logger.warning("Discarding unreadable cache entry %s", self.cache_key)
            self.cache.remove(self.cache_key)

    def flush(self) -> None:
        self.cache.set(self.cache_key, self.snapshot())


class SyncedStore(PersistedStore, Generic[T]):
    """A persisted store that also mirrors a remote collection."""

    model: type[T]
    row_model: type[BaseModel]
    load_error_message = "Failed to load your data. Please try again."
    add_error_message = "Failed to save. Please try again."
    update_error_message = "Failed to save your changes. Please try again."
    delete_error_message = "Failed to remove. Please try again."

    def __init__(self, gateway: CollectionGateway, cache: PreferenceCache, *, timeout: float | None = None):
        super().__init__(cache)
        self.gateway = gateway
        self.timeout = settings.store_call_timeout_seconds if timeout is None else timeout
        self.is_loading = False
        self.error: str | None = None
        self.pending: dict[str, PendingChange] = {}
        self.drifted: list[str] = []
        self._load_seq = 0

    def key_of(self, entity: T) -> str:
        raise NotImplementedError

    def from_row(self, row: Any) -> T:
        raise NotImplementedError

    def decode_row(self, row: Any) -> T:
        try:
            return self.from_row(self.row_model.model_validate(row))
        except PydanticValidationError as exc:
            raise RemoteStoreError(
                f"Unrecognized {self.row_model.__name__} shape from remote store",
                operation="decode",
            ) from exc

    async def _call(self, operation: str, awaitable: Awaitable[Any]) -> Any:
        try:
            if self.timeout:
                return await asyncio.wait_for(awaitable, self.timeout)
            return await awaitable
        except asyncio.TimeoutError as exc:
            raise RemoteStoreError(f"{operation} timed out after {self.timeout}s", operation=operation) from exc
        except RemoteStoreError:
            raise
        except Exception as exc:
            raise RemoteStoreError(str(exc) or exc.__class__.__name__, operation=operation) from exc

    def _fail(self, message: str, exc: Exception) -> None:
        self.error = message
        logger.error("%s %s", self.__class__.__name__, exc)

    def _mark_pending(self, key: str, operation: str, fields: dict[str, Any] | None = None) -> None:
        previous = self.pending.get(key)
        merged = dict(previous.fields) if previous and previous.operation == operation else {}
        merged.update(fields or {})
        self.pending[key] = PendingChange(operation=operation, fields=merged)

    def _patched(self, entity: T, fields: dict[str, Any]) -> T:
        return self.model.model_validate({**entity.to_wire(), **fields})

    async def _fetch(self, user_id: str) -> list[T] | None:
        """Fetch and decode the user's rows; None when the load failed or was superseded."""
        self._load_seq += 1
        seq = self._load_seq
        self.is_loading = True
        self.error = None
        try:
            rows = await self._call("load", self.gateway.get_by_user_id(user_id))
            decoded = [self.decode_row(row) for row in rows]
        except RemoteStoreError as exc:
            if seq == self._load_seq:
                self.is_loading = False
                self._fail(self.load_error_message, exc)
            return None
        if seq != self._load_seq:
            return None
        self.is_loading = False
        self._reconcile(decoded)
        return decoded

    def _reconcile(self, remote: list[T]) -> None:
        by_key = {self.key_of(entity): entity for entity in remote}
        drifted = []
        for key, change in self.pending.items():
            current = by_key.get(key)
            if change.operation == "delete":
                if current is not None:
                    drifted.append(key)
                continue
            if current is None:
                drifted.append(key)
                continue
            wire = current.to_wire()
            if any(wire.get(name) != value for name, value in change.fields.items()):
                drifted.append(key)
        if drifted:
            logger.warning(
                "%s: local changes never reached the remote store for %s; using remote state",
                self.__class__.__name__,
                ", ".join(drifted),
            )
        self.drifted = drifted
        self.pending = {}


class EntityStore(SyncedStore[T]):
    """Store of many entities keyed by their logical id."""

    def __init__(self, gateway: CollectionGateway, cache: PreferenceCache, *, timeout: float | None = None):
        super().__init__(gateway, cache, timeout=timeout)
        self.items: list[T] = []

    @property
    def state(self) -> StoreState[T]:
        return StoreState(items=list(self.items), is_loading=self.is_loading, error=self.error)

    def to_row_data(self, entity: T) -> dict[str, Any]:
        raise NotImplementedError

    def snapshot(self) -> list[dict[str, Any]]:
        return [item.to_wire() for item in self.items]

    def restore(self, data: Any) -> None:
        self.items = [self.model.model_validate(item) for item in data]

    def find(self, entity_id: str) -> T | None:
        for item in self.items:
            if self.key_of(item) == entity_id or getattr(item, "db_id", None) == entity_id:
                return item
        return None

    def _replace(self, key: str, entity: T) -> None:
        self.items = [entity if self.key_of(item) == key else item for item in self.items]

    async def load(self, user_id: str) -> None:
        items = await self._fetch(user_id)
        if items is None:
            return
        self.items = items
        self.flush()

    async def add(self, user_id: str, entity: T) -> T | None:
        try:
            row = await self._call("add", self.gateway.add(user_id, self.to_row_data(entity)))
            created = self.decode_row(row)
        except RemoteStoreError as exc:
            self._fail(self.add_error_message, exc)
            return None
        key = self.key_of(created)
        self.items = [item for item in self.items if self.key_of(item) != key] + [created]
        self.flush()
        return created

    async def update(self, entity_id: str, fields: dict[str, Any]) -> T | None:
        current = self.find(entity_id)
        if current is None:
            logger.warning("%s: update for unknown entity %s ignored", self.__class__.__name__, entity_id)
            return None
        fields = {wire_key(name): value for name, value in fields.items()}
        key = self.key_of(current)
        patched = self._patched(current, fields)
        self._replace(key, patched)
        self.flush()

        if not patched.db_id:
            # TODO: replay these once the pending add settles instead of waiting for the next load.
            logger.warning(
                "%s: %s has no remote row yet; update kept in memory only",
                self.__class__.__name__,
                key,
            )
            self._mark_pending(key, "update", fields)
            return patched

        try:
            row = await self._call("update", self.gateway.update(patched.db_id, fields))
            confirmed = self.decode_row(row).to_wire()
        except RemoteStoreError as exc:
            self._mark_pending(key, "update", fields)
            self._fail(self.update_error_message, exc)
            return patched

        self.pending.pop(key, None)
        latest = self.find(key)
        if latest is None:
            return patched
        settled = self._patched(latest, {name: confirmed[name] for name in fields if name in confirmed})
        self._replace(key, settled)
        self.flush()
        return settled

    async def remove(self, entity_id: str) -> bool:
        current = self.find(entity_id)
        if current is None:
            return False
        key = self.key_of(current)
        self.items = [item for item in self.items if self.key_of(item) != key]
        self.flush()

        if not current.db_id:
            return True
        try:
            await self._call("delete", self.gateway.delete(current.db_id))
        except RemoteStoreError as exc:
            if exc.not_found:
                return True
            self._mark_pending(key, "delete")
            self._fail(self.delete_error_message, exc)
            return True
        self.pending.pop(key, None)
        return True
