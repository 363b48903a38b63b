"""Organization, role, workgroup and editor schemas."""

from typing import Optional

from pydantic import Field, UUID4

from keybuilder.schemas.base import CamelModel


class OrganizationOut(CamelModel):
    id: int
    full_name: Optional[str] = None
    short_name: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None


class RoleOut(CamelModel):
    id: int
    name: Optional[str] = None
    description: Optional[str] = None


class WorkgroupInput(CamelModel):
    name: str = Field(min_length=1, max_length=100)


class WorkgroupOut(CamelModel):
    id: int = Field(validation_alias="workgroup_id")
    name: str
    organization_id: int


class MemberAdd(CamelModel):
    email: str = Field(min_length=3, max_length=200)
    workgroup_id: int


class MemberOut(CamelModel):
    id: int
    name: str
    email: Optional[str] = None
    # user_workgroups / editors row id, used to remove the member
    link_id: int


class EditorAdd(CamelModel):
    email: str = Field(min_length=3, max_length=200)
    key_id: UUID4


class EditorRemoval(CamelModel):
    key_id: UUID4


class EditorOut(CamelModel):
    id: int
    key_id: str
    name: str
    role_id: Optional[int] = None
    organization_id: Optional[int] = None
