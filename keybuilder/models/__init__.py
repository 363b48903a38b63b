"""SQLAlchemy model package."""

from keybuilder.models.user import User, Role, RoleInfo, RolePermission
from keybuilder.models.organization import Organization, OrganizationInfo, Workgroup, UserWorkgroup
from keybuilder.models.key import Key, KeyInfo, KeyLanguage, KeyPublisher, Editor, Revision, KeyRevision
from keybuilder.models.entity import Taxon, Character, CharacterState
from keybuilder.models.media import Media, MediaInfo, KeyMedia, GroupMedia, CollectionMedia
from keybuilder.models.group import KeyGroup, GroupInfo, GroupParent, Collection, CollectionInfo, KeyCollection

__all__ = [
    "User", "Role", "RoleInfo", "RolePermission",
    "Organization", "OrganizationInfo", "Workgroup", "UserWorkgroup",
    "Key", "KeyInfo", "KeyLanguage", "KeyPublisher", "Editor", "Revision", "KeyRevision",
    "Taxon", "Character", "CharacterState",
    "Media", "MediaInfo", "KeyMedia", "GroupMedia", "CollectionMedia",
    "KeyGroup", "GroupInfo", "GroupParent", "Collection", "CollectionInfo", "KeyCollection",
]
