from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base
from models.user import user_roles


class Roles:
    """Role names known to the application."""
    USER = "User"
    ADMIN = "Admin"

    ALL = (USER, ADMIN)


class Role(BaseModel, Base):
    __tablename__ = "roles"

    name = Column(String(64), nullable=False, unique=True, index=True)

    users = relationship("User", secondary=user_roles, back_populates="roles")

    def __repr__(self):
        return f"<Role name={self.name}>"
