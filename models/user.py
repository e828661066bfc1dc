from sqlalchemy import Column, String, ForeignKey, Index, text
from sqlalchemy.orm import relationship

from models.base_model import Base, BaseModel, SoftDeleteMixin


class User(SoftDeleteMixin, BaseModel, Base):
    __tablename__ = "users"

    name = Column(String(100), nullable=False)
    # case-sensitive, stored as given
    email = Column(String(255), nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    permission_id = Column(
        String(36),
        ForeignKey("permissions.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )

    permission = relationship("Permission", back_populates="users")
    articles = relationship("Article", back_populates="author")

    __table_args__ = (
        # email is unique among active users only; soft-deleted rows free it up
        Index(
            "uq_users_email_active",
            "email",
            unique=True,
            sqlite_where=text("deleted_at IS NULL"),
            postgresql_where=text("deleted_at IS NULL"),
        ),
        Index("ix_users_created_at_id", "created_at", "id"),
    )

    @property
    def password(self):
        raise AttributeError("Password: Write-only field")

    @property
    def permission_code(self):
        if self.permission is None:
            return None
        return self.permission.code
