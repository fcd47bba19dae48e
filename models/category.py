from sqlalchemy import Integer, Column, String, Text
from sqlalchemy.orm import relationship

from models.base import Base, ApiModel


class Category(Base):
    __tablename__ = 'categories'

    id = Column(Integer, primary_key=True, unique=True)
    name = Column(String, nullable=False, unique=True)
    slug = Column(String, nullable=False, unique=True)
    description = Column(Text, nullable=True)
    image = Column(String, nullable=True)

    # Relationships
    products = relationship("Product", back_populates="category")


class CategoryDTO(ApiModel):
    id: int | None = None
    name: str | None = None
    slug: str | None = None
    description: str | None = None
    image: str | None = None
