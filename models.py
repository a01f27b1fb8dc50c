from datetime import datetime, timezone

from sqlalchemy import (Boolean, Column, DateTime, Enum, ForeignKey, Index, Integer, JSON, String, Text,
                        UniqueConstraint)
from sqlalchemy.orm import relationship

from database import Base

PROJECT_TYPES = ("startup", "company", "personal", "community")

MALAYSIAN_LOCATIONS = (
    "Kuala Lumpur", "Penang", "Johor", "Selangor", "Sabah", "Sarawak", "Perak", "Kedah",
    "Negeri Sembilan", "Pahang", "Terengganu", "Kelantan", "Perlis", "Melaka", "Putrajaya", "Labuan",
)


def utcnow():
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    products = relationship("Product", back_populates="author", cascade="all, delete-orphan", passive_deletes=True)
    votes = relationship("Vote", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    comments = relationship("Comment", back_populates="author", cascade="all, delete-orphan", passive_deletes=True)
    sessions = relationship("AuthSession", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)


class AuthSession(Base):
    __tablename__ = "auth_sessions"

    token = Column(String(64), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="sessions")


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), index=True, nullable=False)
    description = Column(Text, nullable=False)
    url = Column(String(255), nullable=False)
    tags = Column(JSON, nullable=False, default=list)
    project_type = Column(
        Enum(*PROJECT_TYPES, name="project_type", create_constraint=True, validate_strings=True),
        index=True, nullable=False, default="personal",
    )
    location = Column(String(100), index=True, nullable=True)
    is_made_in_my = Column(Boolean, index=True, nullable=False, default=True)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    author = relationship("User", back_populates="products")
    votes = relationship("Vote", back_populates="product", cascade="all, delete-orphan", passive_deletes=True)
    comments = relationship("Comment", back_populates="product", cascade="all, delete-orphan", passive_deletes=True)

    __table_args__ = (Index("ix_products_created_at_made_in_my", "created_at", "is_made_in_my"),)


class Vote(Base):
    __tablename__ = "votes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, index=True, nullable=False)

    user = relationship("User", back_populates="votes")
    product = relationship("Product", back_populates="votes")

    __table_args__ = (UniqueConstraint('user_id', 'product_id', name='_user_product_vote_uc'),)


class Comment(Base):
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, index=True)
    content = Column(Text, nullable=False)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    author = relationship("User", back_populates="comments")
    product = relationship("Product", back_populates="comments")
