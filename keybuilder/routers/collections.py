from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from keybuilder.database import get_db
from keybuilder.middleware.auth_middleware import require_permissions
from keybuilder.schemas.group import (
    CollectionCreate,
    CollectionKeyAdd,
    CollectionKeyRemoval,
    CollectionOut,
    CollectionUpdate,
)
from keybuilder.services import collection_service
from keybuilder.utils.permissions import BROWSE_COLLECTIONS, CREATE_COLLECTION, EDIT_COLLECTION, PermissionContext

router = APIRouter(prefix="/api/collections", tags=["collections"])


@router.get("", response_model=List[CollectionOut])
def list_collections(
    language: Optional[str] = None,
    db: Session = Depends(get_db),
    _context: PermissionContext = Depends(require_permissions(BROWSE_COLLECTIONS)),
):
    return collection_service.list_collections(db, language)


@router.get("/{collection_id}", response_model=CollectionOut)
def get_collection(
    collection_id: int,
    language: Optional[str] = None,
    db: Session = Depends(get_db),
    _context: PermissionContext = Depends(require_permissions(BROWSE_COLLECTIONS)),
):
    return collection_service.get_collection(db, collection_id, language)


@router.post("/key")
def add_key(
    data: CollectionKeyAdd,
    db: Session = Depends(get_db),
    context: PermissionContext = Depends(require_permissions(EDIT_COLLECTION)),
):
    return collection_service.add_key(db, data, context)


@router.post("")
def create_collection(
    data: CollectionCreate,
    db: Session = Depends(get_db),
    context: PermissionContext = Depends(require_permissions(CREATE_COLLECTION)),
):
    return collection_service.create_collection(db, data, context.user)


@router.put("/{collection_id}")
def update_collection(
    collection_id: int,
    data: CollectionUpdate,
    db: Session = Depends(get_db),
    context: PermissionContext = Depends(require_permissions(EDIT_COLLECTION)),
):
    collection_service.update_collection(db, collection_id, data, context)
    return {"message": "Collection updated"}


@router.delete("/key/{collections_id}")
def remove_key(
    collections_id: int,
    data: CollectionKeyRemoval,
    db: Session = Depends(get_db),
    _context: PermissionContext = Depends(require_permissions(EDIT_COLLECTION)),
):
    collection_service.remove_key(db, collections_id, data)
    return {"message": "Key removed from collection"}


@router.delete("/{collection_id}")
def delete_collection(
    collection_id: int,
    db: Session = Depends(get_db),
    context: PermissionContext = Depends(require_permissions(CREATE_COLLECTION)),
):
    collection_service.delete_collection(db, collection_id, context)
    return {"message": "Collection deleted"}
