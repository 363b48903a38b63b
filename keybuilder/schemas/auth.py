from typing import List, Optional

from pydantic import Field

from keybuilder.schemas.base import CamelModel


class ProfileOut(CamelModel):
    name: str
    organization_id: Optional[int] = None
    role_id: Optional[int] = None
    workgroups: List[int] = Field(default_factory=list)
    permissions: List[str] = Field(default_factory=list)


class SessionOut(CamelModel):
    user: ProfileOut


class LogoutUrlOut(CamelModel):
    logout_url: str
