"""
User and role managers.

Both report problems as ``(ok, errors)`` tuples instead of raising, the same
way the rest of the app reports results of write operations.
"""
import uuid

import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from authdesk.config import BCRYPT_ROUNDS, PASSWORD_MIN_LENGTH
from authdesk.logger import log
from authdesk.models import User, Role, Permission, UserRole, RolePermission


def normalize(value):
    return value.strip().upper() if value else value


# --- PASSWORDS ---

class PasswordPolicy:
    def __init__(self, min_length=PASSWORD_MIN_LENGTH, require_digit=True):
        self.min_length = min_length
        self.require_digit = require_digit

    def validate(self, password):
        """Returns the list of broken rules (empty means the password is fine)"""
        errors = []
        if not password or len(password) < self.min_length:
            errors.append(f"Password must be at least {self.min_length} characters.")
        if self.require_digit and not any(ch.isdigit() for ch in password or ""):
            errors.append("Password must contain at least one digit.")
        return errors


def hash_password(password: str, rounds: int = None) -> str:
    # bcrypt works with bytes, the column stores text
    salt = bcrypt.gensalt(rounds=rounds or BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # stored hash is not a bcrypt hash
        return False


# --- USERS ---

class UserManager:
    def __init__(self, db: Session, rounds: int = None, password_policy: PasswordPolicy = None):
        self.db = db
        self.rounds = rounds
        self.password_policy = password_policy or PasswordPolicy()

    @property
    def users(self):
        return self.db.query(User)

    def find_by_name(self, user_name):
        return self.users.filter(User.normalized_user_name == normalize(user_name)).first()

    def find_by_email(self, email):
        return self.users.filter(User.normalized_email == normalize(email)).first()

    def create(self, user: User, password: str):
        errors = self.password_policy.validate(password)

        if not user.user_name:
            errors.append("User name is required.")
        elif self.find_by_name(user.user_name):
            errors.append(f"User name '{user.user_name}' is already taken.")

        # one account per email
        if not user.email:
            errors.append("Email is required.")
        elif self.find_by_email(user.email):
            errors.append(f"Email '{user.email}' is already taken.")

        if errors:
            return False, errors

        user.normalized_user_name = normalize(user.user_name)
        user.normalized_email = normalize(user.email)
        user.security_stamp = uuid.uuid4().hex.upper()
        user.concurrency_stamp = str(uuid.uuid4())
        user.password_hash = hash_password(password, self.rounds)

        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            return False, [str(e.orig)]

        log.info(f"User '{user.user_name}' created")
        return True, []

    def check_password(self, user: User, password: str) -> bool:
        return verify_password(password, user.password_hash)

    def get_roles(self, user: User):
        """Role names of the user, sorted"""
        rows = (
            self.db.query(Role.name)
            .join(UserRole, UserRole.role_id == Role.id)
            .filter(UserRole.user_id == user.id)
            .order_by(Role.name)
            .all()
        )
        return [name for (name,) in rows]

    def add_to_role(self, user: User, role_name: str):
        role = self.db.query(Role).filter(Role.normalized_name == normalize(role_name)).first()
        if not role:
            return False, [f"Role '{role_name}' does not exist."]

        exists = self.db.query(UserRole).filter_by(user_id=user.id, role_id=role.id).first()
        if exists:
            return False, [f"User '{user.user_name}' is already in role '{role.name}'."]

        self.db.add(UserRole(user_id=user.id, role_id=role.id))
        self.db.commit()
        return True, []


# --- ROLES ---

class RoleManager:
    def __init__(self, db: Session):
        self.db = db

    @property
    def roles(self):
        return self.db.query(Role)

    def find_by_name(self, name):
        return self.roles.filter(Role.normalized_name == normalize(name)).first()

    def create(self, role: Role):
        if not role.name:
            return False, ["Role name is required."]
        if self.find_by_name(role.name):
            return False, [f"Role '{role.name}' already exists."]

        role.normalized_name = normalize(role.name)
        role.concurrency_stamp = str(uuid.uuid4())
        self.db.add(role)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            return False, [str(e.orig)]

        log.info(f"Role '{role.name}' created")
        return True, []

    def add_permission(self, role: Role, permission_name: str):
        permission = self.db.query(Permission).filter(Permission.name == permission_name).first()
        if not permission:
            return False, [f"Permission '{permission_name}' does not exist."]

        exists = self.db.query(RolePermission).filter_by(role_id=role.id, permission_id=permission.id).first()
        if exists:
            return False, [f"Role '{role.name}' already has '{permission_name}'."]

        self.db.add(RolePermission(role_id=role.id, permission_id=permission.id))
        self.db.commit()
        return True, []
