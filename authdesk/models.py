import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, TypeAdapter, ValidationError
from pydantic_core import to_json
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Text, Integer, MetaData, Uuid
from sqlalchemy.orm import declarative_base, relationship
from uuid6 import uuid7

from authdesk.config import DB_SCHEMA

# Every table sits in the auth schema
Base = declarative_base(metadata=MetaData(schema=DB_SCHEMA))


def utcnow():
    return datetime.now(timezone.utc)


def _fk(target):
    return ForeignKey(f"{DB_SCHEMA}.{target}", ondelete="CASCADE")


# --- 1. USERS ---
class User(Base):
    __tablename__ = 'users'

    id = Column(Uuid, primary_key=True, default=uuid7)

    user_name = Column(String(256), unique=True, nullable=False, index=True)
    normalized_user_name = Column(String(256), unique=True, nullable=False, index=True)
    email = Column(String(256), unique=True, nullable=False, index=True)
    normalized_email = Column(String(256), nullable=False, index=True)
    email_confirmed = Column(Boolean, default=False, nullable=False)

    password_hash = Column(String(255), nullable=True)
    security_stamp = Column(String(64), nullable=True)
    concurrency_stamp = Column(String(64), nullable=True, default=lambda: str(uuid.uuid4()))

    phone_number = Column(String(32), nullable=True)
    phone_number_confirmed = Column(Boolean, default=False, nullable=False)

    full_name = Column(String(256), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    last_login = Column(DateTime(timezone=True), nullable=True)

    # Relations
    detail = relationship("UserDetail", back_populates="user", uselist=False, cascade="all, delete-orphan")
    user_roles = relationship("UserRole", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User {self.user_name}>"


# --- 2. ROLES ---
class Role(Base):
    __tablename__ = 'roles'

    id = Column(Uuid, primary_key=True, default=uuid7)
    name = Column(String(256), unique=True, nullable=False)
    normalized_name = Column(String(256), unique=True, nullable=False, index=True)
    description = Column(String(500), nullable=True)
    is_default = Column(Boolean, default=False, nullable=False)
    concurrency_stamp = Column(String(64), nullable=True, default=lambda: str(uuid.uuid4()))

    user_roles = relationship("UserRole", back_populates="role", cascade="all, delete-orphan")
    role_permissions = relationship("RolePermission", back_populates="role", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Role {self.name}>"


# --- 3. PERMISSIONS ---
class Permission(Base):
    __tablename__ = 'permissions'

    id = Column(Uuid, primary_key=True, default=uuid7)
    name = Column(String(256), unique=True, nullable=False)  # e.g. "CanViewUser"
    description = Column(String(500), nullable=True)

    role_permissions = relationship("RolePermission", back_populates="permission", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Permission {self.name}>"


# --- 4. USER <-> ROLE ---
class UserRole(Base):
    __tablename__ = 'user_roles'

    user_id = Column(Uuid, _fk('users.id'), primary_key=True)
    role_id = Column(Uuid, _fk('roles.id'), primary_key=True)

    user = relationship("User", back_populates="user_roles")
    role = relationship("Role", back_populates="user_roles")


# --- 5. ROLE <-> PERMISSION ---
class RolePermission(Base):
    __tablename__ = 'role_permissions'

    role_id = Column(Uuid, _fk('roles.id'), primary_key=True)
    permission_id = Column(Uuid, _fk('permissions.id'), primary_key=True)

    role = relationship("Role", back_populates="role_permissions")
    permission = relationship("Permission", back_populates="role_permissions")


# --- 6. PROFILE DETAILS (1:1 with users) ---
class UserDetail(Base):
    __tablename__ = 'user_details'

    id = Column(Uuid, primary_key=True, default=uuid7)
    user_id = Column(Uuid, _fk('users.id'), unique=True, nullable=False)

    identity_number = Column(String(14), nullable=True)
    birthdate = Column(DateTime, nullable=True)
    user_type_id = Column(Integer, nullable=True)
    gender_id = Column(Integer, nullable=True)
    nationality_id = Column(Integer, nullable=True)
    address = Column(String(500), nullable=True)

    # free-form JSON: interests, preferences, social handles...
    extra = Column(Text, nullable=True)

    user = relationship("User", back_populates="detail")

    def get_extra(self, shape=dict):
        """
        Decodes `extra` as `shape`: dict, list, a typing generic such as
        List[str], a dataclass or a pydantic model (see schemas.UserExtra).
        Empty, broken or differently shaped payloads give None.
        """
        if not self.extra:
            return None

        try:
            return TypeAdapter(shape).validate_json(self.extra)
        except ValidationError:
            return None

    def set_extra(self, value):
        """Stores any JSON-friendly value (dataclasses and pydantic models included) in `extra`"""
        if isinstance(value, BaseModel):
            self.extra = value.model_dump_json(by_alias=True)
        else:
            self.extra = to_json(value, by_alias=True).decode('utf-8')
