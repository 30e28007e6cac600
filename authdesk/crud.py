from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from authdesk.identity import normalize, verify_password
from authdesk.models import User, Role, Permission, UserRole, RolePermission, UserDetail, utcnow

# --- USERS (READ) ---

def get_user_by_id(db: Session, user_id):
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str):
    """Finds a user by email, case-insensitive"""
    return db.query(User).filter(User.normalized_email == normalize(email)).first()


def get_user_by_login(db: Session, login: str):
    """Login is either the user name or the email"""
    key = normalize(login)
    return db.query(User).filter(
        or_(User.normalized_user_name == key, User.normalized_email == key)
    ).first()


def get_all_users(db: Session):
    """All users with their details and roles, newest first"""
    return (
        db.query(User)
        .options(joinedload(User.detail), joinedload(User.user_roles).joinedload(UserRole.role))
        .order_by(User.created_at.desc())
        .all()
    )


# --- AUTH ---

def authenticate_user(db: Session, login: str, password: str):
    """
    Checks login and password.
    Returns the User or None.
    """
    user = get_user_by_login(db, login)
    if not user or not user.is_active:
        return None

    if not verify_password(password, user.password_hash):
        return None

    user.last_login = utcnow()
    db.commit()
    return user


# --- PERMISSIONS ---

def get_user_permissions(db: Session, user_id):
    """Names of every permission the user gets through its roles"""
    rows = (
        db.query(Permission.name)
        .join(RolePermission, RolePermission.permission_id == Permission.id)
        .join(UserRole, UserRole.role_id == RolePermission.role_id)
        .filter(UserRole.user_id == user_id)
        .distinct()
        .all()
    )
    return {name for (name,) in rows}


def user_has_permission(db: Session, user_id, permission_name: str) -> bool:
    return permission_name in get_user_permissions(db, user_id)


# --- STATS ---

def get_dashboard_stats(db: Session):
    """Row counts for the dashboard"""
    return {
        "users": db.query(User).count(),
        "roles": db.query(Role).count(),
        "permissions": db.query(Permission).count(),
        "details": db.query(UserDetail).count(),
    }
