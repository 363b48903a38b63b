import json
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from keybuilder.database import get_db
from keybuilder.exceptions import ValidationFailedError
from keybuilder.middleware.auth_middleware import get_current_user, require_permissions
from keybuilder.models.user import User
from keybuilder.schemas.media import (
    EntityMediaRemoval,
    MediaLinkRemoval,
    MediaListItemOut,
    MediaUpdate,
    RevisionMediaUpdate,
)
from keybuilder.services import media_linking, media_service
from keybuilder.utils.permissions import (
    CREATE_COLLECTION,
    CREATE_GROUP,
    CREATE_KEY,
    EDIT_COLLECTION,
    EDIT_GROUP,
    EDIT_KEY,
    EDIT_KEY_INFO,
    PermissionContext,
    ensure_key_permission,
)

router = APIRouter(prefix="/api/media", tags=["media"])

UPLOAD_PERMISSIONS = (
    CREATE_KEY, EDIT_KEY_INFO, EDIT_KEY, CREATE_GROUP, EDIT_GROUP, CREATE_COLLECTION, EDIT_COLLECTION,
)


@router.get("/info/list", response_model=List[MediaListItemOut])
def list_media_info(
    ids: str = Query(..., description="JSON array of media ids"),
    db: Session = Depends(get_db),
    _current_user: User = Depends(get_current_user),
):
    try:
        media_ids = [int(media_id) for media_id in json.loads(ids)]
    except (ValueError, TypeError):
        raise ValidationFailedError("ids must be a JSON array of integers")
    return media_service.list_media(db, media_ids)


@router.get("/thumbnails/{media_id}")
def get_thumbnail(media_id: int, db: Session = Depends(get_db), _current_user: User = Depends(get_current_user)):
    return FileResponse(media_service.get_media_path(db, media_id, thumbnail=True))


@router.get("/{media_id}")
def get_media_file(media_id: int, db: Session = Depends(get_db), _current_user: User = Depends(get_current_user)):
    return FileResponse(media_service.get_media_path(db, media_id))


@router.put("/revision/{revision_id}")
def update_revision_media(
    revision_id: str,
    data: RevisionMediaUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_key_permission(db, current_user, str(data.key_id), EDIT_KEY)
    return media_service.update_revision_media(db, revision_id, data, current_user)


@router.put("/{media_id}")
def update_media(
    media_id: int,
    data: MediaUpdate,
    db: Session = Depends(get_db),
    _context: PermissionContext = Depends(require_permissions(EDIT_KEY_INFO, EDIT_KEY, EDIT_GROUP, EDIT_COLLECTION)),
):
    media_service.update_media_info(db, media_id, data)
    return {"message": "Media updated"}


@router.post("/{kind}")
async def upload_media(
    kind: Literal["key", "group", "collection", "taxon", "character", "state"],
    files: List[UploadFile] = File(...),
    entity_id: str = Form(..., alias="entityId"),
    key_id: Optional[str] = Form(None, alias="keyId"),
    revision_id: Optional[str] = Form(None, alias="revisionId"),
    state_id: Optional[str] = Form(None, alias="stateId"),
    file_info: Optional[str] = Form(None, alias="fileInfo"),
    db: Session = Depends(get_db),
    context: PermissionContext = Depends(require_permissions(*UPLOAD_PERMISSIONS)),
):
    if kind == "key":
        ensure_key_permission(db, context.user, entity_id, EDIT_KEY_INFO)
    elif kind in media_linking.ENTITY_KINDS and key_id:
        ensure_key_permission(db, context.user, key_id, EDIT_KEY)
    return await media_service.upload_media(
        db,
        kind,
        files,
        context.user,
        entity_id,
        key_id=key_id,
        revision_id=revision_id,
        state_id=state_id,
        file_info=file_info,
    )


@router.delete("/key/{key_id}")
def delete_key_media(
    key_id: str,
    data: MediaLinkRemoval,
    db: Session = Depends(get_db),
    _context: PermissionContext = Depends(require_permissions(CREATE_KEY)),
):
    media_service.delete_linked_media(db, "key", key_id, [media.id for media in data.media])
    return {"message": "Media deleted"}


@router.delete("/group/{group_id}")
def delete_group_media(
    group_id: int,
    data: MediaLinkRemoval,
    db: Session = Depends(get_db),
    _context: PermissionContext = Depends(require_permissions(CREATE_GROUP)),
):
    media_service.delete_linked_media(db, "group", group_id, [media.id for media in data.media])
    return {"message": "Media deleted"}


@router.delete("/collection/{collection_id}")
def delete_collection_media(
    collection_id: int,
    data: MediaLinkRemoval,
    db: Session = Depends(get_db),
    _context: PermissionContext = Depends(require_permissions(CREATE_COLLECTION)),
):
    media_service.delete_linked_media(db, "collection", collection_id, [media.id for media in data.media])
    return {"message": "Media deleted"}


@router.delete("/{kind}")
def remove_entity_media(
    kind: Literal["taxon", "character", "state"],
    data: EntityMediaRemoval,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_key_permission(db, current_user, str(data.key_id), EDIT_KEY)
    return media_service.remove_entity_media(db, kind, data, current_user)
