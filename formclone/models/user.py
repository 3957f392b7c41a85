from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from formclone.db.base import Base

class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True)
    hashed_password = Column(String, nullable=False)

    forms = relationship("Form", back_populates="owner")
