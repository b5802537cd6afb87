"""ORM model for application users (auth and RBAC)."""

import enum

from sqlalchemy import Column, Enum, Integer, String

from app.models.base import Base


class Role(str, enum.Enum):
    """Closed set of roles. ADMIN holds every capability USER has."""

    ADMIN = "admin"
    USER = "user"


class User(Base):
    """
    User account for JWT authentication and role-based access control.

    username and email are unique; password_hash is a bcrypt hash and is
    never returned by any endpoint.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False, unique=True, index=True)
    email = Column(String(320), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(
        Enum(Role, name="user_role", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=Role.USER,
    )
