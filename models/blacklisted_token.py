from sqlalchemy import Column, Text, DateTime

from models.base_model import BaseModel, Base, utcnow


class BlacklistedToken(BaseModel, Base):
    __tablename__ = "token_blacklist"

    token = Column(Text, nullable=False, unique=True)
    revoked_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    # natural expiry of the token; only the prune command reads it
    expires_at = Column(DateTime(timezone=True), nullable=True, index=True)

    def __repr__(self):
        return f"<BlacklistedToken revoked_at={self.revoked_at}>"
