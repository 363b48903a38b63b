from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from keybuilder.database import get_db
from keybuilder.middleware.auth_middleware import get_current_user
from keybuilder.models.user import User
from keybuilder.schemas.character import (
    CharacterCreate,
    CharacterCreatedOut,
    CharacterDelete,
    CharacterUpdate,
    PremiseStatesRemoval,
    PremiseUpdate,
    StateCreate,
)
from keybuilder.services import character_service
from keybuilder.utils.permissions import EDIT_KEY, ensure_key_permission

router = APIRouter(prefix="/api/characters", tags=["characters"])


@router.post("", response_model=CharacterCreatedOut)
def create_character(
    data: CharacterCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_key_permission(db, current_user, str(data.key_id), EDIT_KEY)
    return character_service.create_character(db, data, current_user)


@router.post("/state")
def create_state(data: StateCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    ensure_key_permission(db, current_user, str(data.key_id), EDIT_KEY)
    return character_service.create_state(db, data)


@router.put("/premise/{character_id}")
def set_premise(
    character_id: str,
    data: PremiseUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_key_permission(db, current_user, str(data.key_id), EDIT_KEY)
    return character_service.set_premise(db, character_id, data, current_user)


@router.put("/states/revision/{revision_id}")
def remove_premise_states(
    revision_id: str,
    data: PremiseStatesRemoval,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_key_permission(db, current_user, str(data.key_id), EDIT_KEY)
    return character_service.remove_premise_states(db, revision_id, data, current_user)


@router.put("/{character_id}")
def update_character(
    character_id: str,
    data: CharacterUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_key_permission(db, current_user, str(data.key_id), EDIT_KEY)
    return character_service.update_character(db, character_id, data, current_user)


@router.delete("/{character_id}")
def delete_character(
    character_id: str,
    data: CharacterDelete,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_key_permission(db, current_user, str(data.key_id), EDIT_KEY)
    return character_service.delete_character(db, character_id, data, current_user)
