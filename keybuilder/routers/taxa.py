from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from keybuilder.database import get_db
from keybuilder.exceptions import NotFoundError
from keybuilder.middleware.auth_middleware import get_current_user, require_permissions
from keybuilder.models.user import User
from keybuilder.schemas.taxon import TaxonCreate, TaxonCreatedOut, TaxonDelete, TaxonUpdate
from keybuilder.services import taxon_service, taxonomy_client
from keybuilder.utils.permissions import EDIT_KEY, PermissionContext, ensure_key_permission

router = APIRouter(prefix="/api/taxa", tags=["taxa"])


@router.get("/scientificname/suggest")
def suggest_scientific_names(
    scientificname: str = Query(..., min_length=1),
    _context: PermissionContext = Depends(require_permissions(EDIT_KEY)),
):
    return taxonomy_client.suggest_scientific_names(scientificname)


@router.get("/scientificname/vernacularname")
def get_vernacular_name(
    scientificname: str = Query(..., min_length=1),
    _context: PermissionContext = Depends(require_permissions(EDIT_KEY)),
):
    taxon_id = taxonomy_client.find_taxon_id(scientificname)
    if taxon_id is None:
        raise NotFoundError("Unknown scientific name")
    name = taxonomy_client.get_vernacular_name(taxon_id)
    if name is None:
        return Response(status_code=204)
    return name


@router.post("", response_model=TaxonCreatedOut)
def create_taxon(data: TaxonCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    ensure_key_permission(db, current_user, str(data.key_id), EDIT_KEY)
    return taxon_service.create_taxon(db, data, current_user)


@router.put("/{taxon_id}")
def update_taxon(
    taxon_id: str,
    data: TaxonUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_key_permission(db, current_user, str(data.key_id), EDIT_KEY)
    return taxon_service.update_taxon(db, taxon_id, data, current_user)


@router.delete("/{taxon_id}")
def delete_taxon(
    taxon_id: str,
    data: TaxonDelete,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_key_permission(db, current_user, str(data.key_id), EDIT_KEY)
    return taxon_service.delete_taxon(db, taxon_id, data, current_user)
