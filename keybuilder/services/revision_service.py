"""Revision lifecycle: snapshot creation, key pointer handling and status changes."""

import copy
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified

from keybuilder.exceptions import ConflictError, KeyBuilderError, NotFoundError
from keybuilder.models.key import Key, KeyRevision, Revision
from keybuilder.models.user import User
from keybuilder.schemas.content import ContentDocument, RevisionMedia

logger = logging.getLogger(__name__)

DRAFT = "DRAFT"
REVIEW = "REVIEW"
ACCEPTED = "ACCEPTED"

SIMPLE_MODE = 1
ADVANCED_MODE = 2


def create_revision(
    db: Session,
    key: Key,
    content: Optional[Dict[str, Any]],
    media: Optional[Dict[str, Any]],
    created_by: int,
    note: Optional[str] = None,
    mode: Optional[int] = None,
) -> Revision:
    """Store a new snapshot for ``key``.

    The revision starts as DRAFT. When the key has no current revision yet the
    new one is accepted on the spot and becomes the key's pointer.
    """
    revision = Revision(
        content=copy.deepcopy(content or {}),
        media=copy.deepcopy(media or {}),
        note=note,
        created_by=created_by,
        status=DRAFT,
        mode=mode or SIMPLE_MODE,
    )
    db.add(revision)
    db.flush()
    db.add(KeyRevision(key_id=key.key_id, revision_id=revision.revision_id))
    if not key.revision_id:
        revision.status = ACCEPTED
        key.revision_id = revision.revision_id
        logger.info("[revision] %s accepted as first revision of key %s", revision.revision_id, key.key_id)
    db.commit()
    db.refresh(revision)
    logger.info("[revision] created %s for key %s (%s)", revision.revision_id, key.key_id, note or "no note")
    return revision


def save_documents(
    db: Session,
    key: Key,
    revision: Revision,
    content: ContentDocument,
    media: RevisionMedia,
    user: User,
    note: str,
) -> str:
    """Persist edited documents as a new revision derived from ``revision``."""
    new_revision = create_revision(
        db, key, content.to_json(), media.to_json(), user.user_id, note=note, mode=revision.mode
    )
    return new_revision.revision_id


def save_in_place_or_branch(
    db: Session,
    key: Key,
    revision: Revision,
    content: ContentDocument,
    media: RevisionMedia,
    user: User,
    note: str,
) -> str:
    """Rewrite an unaccepted revision in place; accepted snapshots get a new revision instead."""
    if revision.status == ACCEPTED:
        return save_documents(db, key, revision, content, media, user, note)
    revision.content = content.to_json()
    revision.media = media.to_json()
    flag_modified(revision, "content")
    flag_modified(revision, "media")
    db.commit()
    logger.info("[revision] updated %s in place (%s)", revision.revision_id, note)
    return revision.revision_id


def find_revision_for_key(db: Session, revision_id: str, key_id: str) -> Tuple[Revision, Key]:
    link = (
        db.query(KeyRevision)
        .filter(KeyRevision.revision_id == str(revision_id), KeyRevision.key_id == str(key_id))
        .first()
    )
    if not link:
        raise NotFoundError("Revision does not belong to key")
    revision = db.query(Revision).filter(Revision.revision_id == link.revision_id).first()
    key = db.query(Key).filter(Key.key_id == link.key_id).first()
    if not revision or not key:
        raise NotFoundError("Revision or key not found")
    return revision, key


def load_documents(revision: Revision) -> Tuple[ContentDocument, RevisionMedia]:
    return ContentDocument.from_json(revision.content), RevisionMedia.from_json(revision.media)


def get_revision(db: Session, revision_id: str) -> Tuple[Revision, str]:
    revision = db.query(Revision).filter(Revision.revision_id == str(revision_id)).first()
    if not revision:
        raise NotFoundError("Revision not found")
    link = db.query(KeyRevision).filter(KeyRevision.revision_id == revision.revision_id).first()
    if not link:
        raise KeyBuilderError("Revision is not associated with a key")
    return revision, link.key_id


def list_revisions(db: Session, key_id: str) -> List[Revision]:
    return (
        db.query(Revision)
        .join(KeyRevision, KeyRevision.revision_id == Revision.revision_id)
        .filter(KeyRevision.key_id == str(key_id))
        .order_by(Revision.created_at.desc())
        .all()
    )


def update_status(db: Session, revision_id: str, key_id: str, status: str) -> Revision:
    """Change a revision's status; accepting it also makes it the key's current revision.

    The key's current revision itself can never be changed through here.
    Two promotions racing on the same key are not serialized; the last commit
    owns the pointer.
    """
    revision, key = find_revision_for_key(db, revision_id, key_id)
    if key.revision_id == revision.revision_id:
        raise ConflictError("Revision is the key's current revision")
    revision.status = status
    if status == ACCEPTED:
        key.revision_id = revision.revision_id
        logger.info("[revision] key %s now points to %s", key.key_id, revision.revision_id)
    db.commit()
    return revision


def change_mode(db: Session, revision_id: str, key_id: str, mode: int, user: User) -> str:
    revision, key = find_revision_for_key(db, revision_id, key_id)
    note = "Changed key mode to {}".format("simple" if mode == SIMPLE_MODE else "advanced")
    new_revision = create_revision(db, key, revision.content, revision.media, user.user_id, note=note, mode=mode)
    return new_revision.revision_id
