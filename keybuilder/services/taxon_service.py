"""Taxon editing on a key's revision content."""

from sqlalchemy.orm import Session

from keybuilder.exceptions import ConflictError, NotFoundError
from keybuilder.models.entity import Taxon as TaxonRow
from keybuilder.models.user import User
from keybuilder.schemas.taxon import TaxonCreate, TaxonDelete, TaxonUpdate
from keybuilder.services import revision_service, taxon_tree


def _load(db: Session, key_id, revision_id):
    revision, key = revision_service.find_revision_for_key(db, revision_id, key_id)
    content, media = revision_service.load_documents(revision)
    return revision, key, content, media


def _get_taxon_row(db: Session, taxon_id: str) -> TaxonRow:
    row = None
    if str(taxon_id).isdigit():
        row = db.query(TaxonRow).filter(TaxonRow.taxon_id == int(taxon_id)).first()
    if not row:
        raise NotFoundError("Taxon not found")
    return row


def create_taxon(db: Session, data: TaxonCreate, user: User) -> dict:
    revision, key, content, media = _load(db, data.key_id, data.revision_id)
    if taxon_tree.find_by_name(content.taxa, data.scientific_name):
        raise ConflictError(f"Scientific name already in use: {data.scientific_name}")
    parent_id = None if taxon_tree.is_root(data.parent_id) else data.parent_id
    if parent_id is not None and taxon_tree.find_by_id(content.taxa, parent_id) is None:
        raise NotFoundError("Parent taxon not found")

    row = TaxonRow(key_id=key.key_id)
    db.add(row)
    db.flush()
    node = taxon_tree.new_taxon(
        row.taxon_id,
        data.scientific_name,
        vernacular_name_no=data.vernacular_name_no,
        vernacular_name_en=data.vernacular_name_en,
        description_no=data.description_no,
        description_en=data.description_en,
    )
    if parent_id is None:
        content.taxa.append(node)
    else:
        taxon_tree.add_to_parent(content.taxa, node, parent_id)
    revision_id = revision_service.save_documents(
        db, key, revision, content, media, user, f"Created new taxon: {data.scientific_name}"
    )
    return {"revision_id": revision_id, "taxon_id": node.id}


def update_taxon(db: Session, taxon_id: str, data: TaxonUpdate, user: User) -> str:
    revision, key, content, media = _load(db, data.key_id, data.revision_id)
    row = _get_taxon_row(db, taxon_id)
    index = taxon_tree.TaxonIndex(content.taxa)
    entry = index.get(row.taxon_id)
    if entry is None:
        raise NotFoundError("Taxon is not part of this revision")

    valid = taxon_tree.modify_taxon_names(
        entry.node,
        content.taxa,
        scientific_name=data.scientific_name,
        vernacular_name_no=data.vernacular_name_no,
        vernacular_name_en=data.vernacular_name_en,
        description_no=data.description_no,
        description_en=data.description_en,
    )
    if not valid:
        raise ConflictError(f"Scientific name already in use: {data.scientific_name}")

    if data.parent_id is not None:
        current_parent = index.parent_id(entry.node.id)
        target_parent = None if taxon_tree.is_root(data.parent_id) else str(data.parent_id)
        if target_parent != current_parent:
            if target_parent is not None:
                if index.get(target_parent) is None:
                    raise NotFoundError("Parent taxon not found")
                if target_parent in index.subtree_ids(entry.node.id):
                    raise ConflictError("A taxon cannot be moved below itself")
            content.statements = taxon_tree.remove_taxon_statements(content.statements, {entry.node.id})
            taxon_tree.reparent(content.taxa, entry.node.id, data.parent_id)

    return revision_service.save_documents(
        db, key, revision, content, media, user, f"Updated taxon: {data.scientific_name}"
    )


def delete_taxon(db: Session, taxon_id: str, data: TaxonDelete, user: User) -> str:
    revision, key, content, media = _load(db, data.key_id, data.revision_id)
    node = taxon_tree.find_by_id(content.taxa, taxon_id)
    if node is None:
        raise NotFoundError("Taxon is not part of this revision")
    name = node.scientific_name
    removed = taxon_tree.remove_taxon(content.taxa, taxon_id)
    content.statements = taxon_tree.remove_taxon_statements(content.statements, removed)
    return revision_service.save_documents(db, key, revision, content, media, user, f"Deleted taxon: {name}")
