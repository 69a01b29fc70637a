from enum import Enum

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship
from sqlalchemy.types import Enum as SAEnum

from models.base_model import Base, BaseModel


class Role(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"


class User(BaseModel, Base):
    __tablename__ = "users"
    firstname = Column(String(255), nullable=True)
    lastname = Column(String(255), nullable=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(SAEnum(Role, name="user_role", native_enum=False), nullable=False, default=Role.USER)

    tokens = relationship("Token", back_populates="user", passive_deletes=True)

    def __repr__(self):
        return f"<User email={self.email}>"
