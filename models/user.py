from sqlalchemy import Column, String, ForeignKey, Table
from sqlalchemy.orm import relationship, validates

from models.base_model import Base, BaseModel

# Association table with CASCADE so role links go away with the user or role
user_roles = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", String(36), ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)


def normalize_username(username: str) -> str:
    return username.strip().lower()


class User(BaseModel, Base):
    __tablename__ = "users"

    username = Column(String(150), nullable=False)
    # case-folded copy of username; its unique index serializes concurrent sign-ups
    normalized_username = Column(String(150), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)

    roles = relationship("Role", secondary=user_roles, back_populates="users", lazy="selectin")
    refresh_tokens = relationship(
        "RefreshToken",
        back_populates="user",
        passive_deletes=True,
        order_by="RefreshToken.created_on",
    )

    @validates("username")
    def _normalize_username(self, key, value):
        self.normalized_username = normalize_username(value)
        return value

    @property
    def password(self):
        raise AttributeError("Password: Write-only field")

    @property
    def role_names(self) -> list[str]:
        return sorted(role.name for role in self.roles)

    def __repr__(self):
        return f"<User username={self.username}>"
