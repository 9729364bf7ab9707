"""
Remote Data Gateway: per-collection CRUD over user-owned documents.

Stores only see the async ``CollectionGateway`` contract. Two adapters are
provided: ``SqlCollectionGateway`` talks to the database in-process and
``HttpCollectionGateway`` talks to the ``/collections`` routes of a running
service. Both surface every failure as ``RemoteStoreError``.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Protocol

import httpx
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from skillsync.core.config import settings
from skillsync.core.database import SessionLocal
from skillsync.core.errors import RemoteStoreError, ValidationError
from skillsync.models.entities import COLLECTIONS

logger = logging.getLogger(__name__)

PROFILES = "profiles"
COURSES = "courses"
PATHWAYS = "pathways"


class CollectionGateway(Protocol):
    collection: str

    async def get_by_user_id(self, user_id: str) -> list[dict[str, Any]]: ...

    async def add(self, user_id: str, data: dict[str, Any]) -> dict[str, Any]: ...

    async def update(self, row_id: str, fields: dict[str, Any]) -> dict[str, Any]: ...

    async def delete(self, row_id: str) -> None: ...


def _resolve(collection: str):
    try:
        return COLLECTIONS[collection]
    except KeyError as exc:
        raise RemoteStoreError(f"Unknown collection '{collection}'", not_found=True) from exc


def _iso(value: Any) -> str | None:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _row_to_document(row: Any, field_map: dict[str, str]) -> dict[str, Any]:
    document = {key: getattr(row, attr) for key, attr in field_map.items()}
    document["$id"] = row.id
    document["$createdAt"] = _iso(row.created_at)
    document["$updatedAt"] = _iso(row.updated_at)
    return document


def _check_fields(collection: str, field_map: dict[str, str], fields: dict[str, Any]) -> None:
    unknown = sorted(set(fields) - set(field_map))
    if unknown:
        raise ValidationError(f"Unknown fields for {collection}: {', '.join(unknown)}")
    if "userId" in fields:
        raise ValidationError("userId cannot be changed")


def _commit(db: Session, collection: str, operation: str) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ValidationError(f"Could not {operation} {collection} row: conflicting or missing fields") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("%s %s commit failed", collection, operation)
        raise RemoteStoreError(f"Database error during {operation}", operation=operation) from exc


def list_rows(db: Session, collection: str, user_id: str) -> list[dict[str, Any]]:
    model, field_map = _resolve(collection)
    rows = (
        db.query(model)
        .filter(model.user_id == user_id)
        .order_by(model.created_at.asc())
        .all()
    )
    return [_row_to_document(row, field_map) for row in rows]


def create_row(db: Session, collection: str, user_id: str, data: dict[str, Any]) -> dict[str, Any]:
    model, field_map = _resolve(collection)
    if not user_id:
        raise ValidationError("userId is required")
    data = dict(data)
    owner = data.pop("userId", user_id)
    if owner != user_id:
        raise ValidationError("userId in data does not match the owning user")
    _check_fields(collection, field_map, data)

    row = model(user_id=user_id, **{field_map[key]: value for key, value in data.items()})
    db.add(row)
    _commit(db, collection, "add")
    db.refresh(row)
    return _row_to_document(row, field_map)


def update_row(db: Session, collection: str, row_id: str, fields: dict[str, Any]) -> dict[str, Any]:
    model, field_map = _resolve(collection)
    _check_fields(collection, field_map, fields)
    row = db.query(model).filter(model.id == row_id).first()
    if not row:
        raise RemoteStoreError(f"{collection} row {row_id} not found", operation="update", not_found=True)
    for key, value in fields.items():
        setattr(row, field_map[key], value)
    _commit(db, collection, "update")
    db.refresh(row)
    return _row_to_document(row, field_map)


def delete_row(db: Session, collection: str, row_id: str) -> None:
    model, _ = _resolve(collection)
    row = db.query(model).filter(model.id == row_id).first()
    if not row:
        raise RemoteStoreError(f"{collection} row {row_id} not found", operation="delete", not_found=True)
    db.delete(row)
    _commit(db, collection, "delete")


class SqlCollectionGateway:
    def __init__(self, collection: str, session_factory: Callable[[], Session] = SessionLocal):
        _resolve(collection)
        self.collection = collection
        self.session_factory = session_factory

    def _run(self, operation: str, func, *args):
        db = self.session_factory()
        try:
            return func(db, self.collection, *args)
        except RemoteStoreError:
            raise
        except ValidationError as exc:
            raise RemoteStoreError(exc.message, operation=operation) from exc
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("%s %s failed", self.collection, operation)
            raise RemoteStoreError(f"Database error during {operation}", operation=operation) from exc
        finally:
            db.close()

    async def get_by_user_id(self, user_id: str) -> list[dict[str, Any]]:
        return await asyncio.to_thread(self._run, "load", list_rows, user_id)

    async def add(self, user_id: str, data: dict[str, Any]) -> dict[str, Any]:
        return await asyncio.to_thread(self._run, "add", create_row, user_id, data)

    async def update(self, row_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        return await asyncio.to_thread(self._run, "update", update_row, row_id, fields)

    async def delete(self, row_id: str) -> None:
        await asyncio.to_thread(self._run, "delete", delete_row, row_id)


class HttpCollectionGateway:
    def __init__(
        self,
        collection: str,
        base_url: str | None = None,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.collection = collection
        self.base_url = (base_url or settings.remote_api_base_url).rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _path(self, row_id: str | None = None) -> str:
        path = f"/collections/{self.collection}/rows"
        return f"{path}/{row_id}" if row_id else path

    async def _request(self, operation: str, method: str, path: str, **kwargs) -> Any:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self.transport,
            ) as client:
                response = await client.request(method, path, **kwargs)
                response.raise_for_status()
                return response.json() if response.content else None
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            try:
                body = exc.response.json()
            except ValueError:
                body = None
            detail = body.get("detail") if isinstance(body, dict) else None
            raise RemoteStoreError(
                f"Remote {operation} on {self.collection} failed ({status}): {detail or exc.response.reason_phrase}",
                operation=operation,
                not_found=status == 404,
            ) from exc
        except httpx.HTTPError as exc:
            raise RemoteStoreError(
                f"Remote store unreachable during {operation}: {exc.__class__.__name__}",
                operation=operation,
            ) from exc

    async def get_by_user_id(self, user_id: str) -> list[dict[str, Any]]:
        payload = await self._request("load", "GET", self._path(), params={"userId": user_id})
        rows = (payload or {}).get("rows")
        if not isinstance(rows, list):
            raise RemoteStoreError("Remote store returned an invalid row listing", operation="load")
        return rows

    async def add(self, user_id: str, data: dict[str, Any]) -> dict[str, Any]:
        return await self._request("add", "POST", self._path(), json={"userId": user_id, "data": data})

    async def update(self, row_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        return await self._request("update", "PATCH", self._path(row_id), json={"fields": fields})

    async def delete(self, row_id: str) -> None:
        await self._request("delete", "DELETE", self._path(row_id))
