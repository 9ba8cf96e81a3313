from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from pvz_service.domain.schemas.enums import UserRole


class UserPK(BaseModel):
    id: UUID = None

    def __eq__(self, other):
        return isinstance(other, UserPK) and self.id == other.id

    def __hash__(self):
        return hash(self.id)


class User(UserPK):
    email: str
    password_hash: str
    role: UserRole
    created_at: datetime


class TokenClaims(BaseModel):
    user_id: str
    role: UserRole
