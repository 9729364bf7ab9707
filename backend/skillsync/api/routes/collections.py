from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from skillsync.api.deps import get_db
from skillsync.core.errors import RemoteStoreError, ValidationError
from skillsync.schemas.api import RowCreateIn, RowsOut, RowUpdateIn
from skillsync.services.gateway import create_row, delete_row, list_rows, update_row

router = APIRouter(prefix="/collections")


def _raise_http(exc: Exception) -> None:
    if isinstance(exc, ValidationError):
        raise HTTPException(status_code=400, detail=exc.message) from exc
    if isinstance(exc, RemoteStoreError):
        raise HTTPException(status_code=404 if exc.not_found else 502, detail=exc.message) from exc
    raise exc


@router.get("/{collection}/rows", response_model=RowsOut)
def list_collection_rows(
    collection: str,
    user_id: str = Query(alias="userId", min_length=1),
    db: Session = Depends(get_db),
):
    try:
        rows = list_rows(db, collection, user_id)
    except (ValidationError, RemoteStoreError) as exc:
        _raise_http(exc)
    return {"rows": rows, "total": len(rows)}


@router.post("/{collection}/rows", status_code=201)
def create_collection_row(collection: str, payload: RowCreateIn, db: Session = Depends(get_db)):
    try:
        return create_row(db, collection, payload.userId, payload.data)
    except (ValidationError, RemoteStoreError) as exc:
        _raise_http(exc)


@router.patch("/{collection}/rows/{row_id}")
def update_collection_row(
    collection: str,
    row_id: str,
    payload: RowUpdateIn,
    db: Session = Depends(get_db),
):
    try:
        return update_row(db, collection, row_id, payload.fields)
    except (ValidationError, RemoteStoreError) as exc:
        _raise_http(exc)


@router.delete("/{collection}/rows/{row_id}", status_code=204)
def delete_collection_row(collection: str, row_id: str, db: Session = Depends(get_db)):
    try:
        delete_row(db, collection, row_id)
    except (ValidationError, RemoteStoreError) as exc:
        _raise_http(exc)
