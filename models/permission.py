from sqlalchemy import Column, String, Integer, Text
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class Permission(BaseModel, Base):
    __tablename__ = "permissions"

    code = Column(Integer, nullable=False, unique=True)
    name = Column(String(64), nullable=False, unique=True)
    description = Column(Text, nullable=True)

    users = relationship("User", back_populates="permission")

    def __repr__(self):
        return f"<Permission code={self.code} name={self.name}>"
