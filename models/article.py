from sqlalchemy import Column, String, Text, ForeignKey, Index
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base, SoftDeleteMixin


class Article(SoftDeleteMixin, BaseModel, Base):
    __tablename__ = "articles"

    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    author_id = Column(String(36), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)

    author = relationship("User", back_populates="articles")

    __table_args__ = (
        # keyset pagination walks (created_at DESC, id DESC)
        Index("ix_articles_created_at_id", "created_at", "id"),
        Index("ix_articles_author_id", "author_id"),
    )
