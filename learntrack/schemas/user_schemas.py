from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class PublicUser(BaseModel):
    """User as returned to clients: never carries the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str
    role: str = "user"


class User(PublicUser):
    hashed_password: str
    created_at: Optional[datetime] = None

    def public(self) -> PublicUser:
        return PublicUser(id=self.id, email=self.email, name=self.name, role=self.role)
