"""Service layer package."""

from keybuilder.services import (
    taxon_tree,
    character_rules,
    revision_service,
    media_linking,
    media_service,
    oidc_client,
    auth_service,
    key_service,
    taxon_service,
    character_service,
    group_service,
    collection_service,
    organization_service,
    workgroup_service,
    editor_service,
    taxonomy_client,
)
