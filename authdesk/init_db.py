import random
import time
from datetime import datetime, timedelta

from sqlalchemy import text
from sqlalchemy.orm import Session

from authdesk.config import SEED_PASSWORD, DB_CONNECT_RETRIES, DB_CONNECT_DELAY
from authdesk.db_session import engine, SessionLocal
from authdesk.identity import UserManager, RoleManager
from authdesk.logger import log
from authdesk.models import User, Role, Permission, UserDetail
from authdesk.schemas import UserExtra, Preferences, SocialMedia
from authdesk.update_db import get_pending_migrations, apply_migrations, describe

# === REFERENCE DATA ===

PERMISSIONS = [
    "CanViewDashboard",
    "CanViewUser",
    "CanEditUser",
    "CanDeleteUser",
    "CanCreateUser",
    "CanViewRole",
    "CanEditRole",
    "CanDeleteRole",
    "CanCreateRole",
]

# role name -> granted permissions
ROLES = {
    "Admin": list(PERMISSIONS),
    "Manager": ["CanViewDashboard", "CanViewUser", "CanEditUser", "CanCreateUser", "CanViewRole"],
    "User": ["CanViewDashboard"],
}

# === DEMO DATA ===

USERS = [
    {"full_name": "admin", "email": "admin@example.com", "phone": "+1234567890", "role": "Admin"},
    {"full_name": "manager", "email": "manager@example.com", "phone": "+1234567891", "role": "Manager"},
    {"full_name": "user1", "email": "user1@example.com", "phone": "+1234567892", "role": "User"},
    {"full_name": "user2", "email": "user2@example.com", "phone": "+1234567893", "role": "User"},
]

STREETS = ["Main", "Oak", "Pine", "Maple", "Cedar", "Elm", "Birch", "Willow", "Park", "Washington"]

INTERESTS = [
    "Reading", "Sports", "Music", "Travel", "Cooking", "Photography",
    "Gaming", "Movies", "Hiking", "Art", "Technology", "Fitness",
]

MIN_AGE, MAX_AGE = 18, 59


def initialize(db: Session, user_manager: UserManager, role_manager: RoleManager, rng=None):
    """
    1. Applies pending migrations.
    2. Seeds permissions, roles, users and user details,
       each step only when its table is still empty.
    Errors are logged and raised again so startup stops.
    """
    log.info("--- DB: Starting database initialization... ---")

    try:
        bind = db.get_bind()
        pending = get_pending_migrations(bind)
        if pending:
            log.info(f"--- DB: Applying {len(pending)} pending migrations... ---")
            for m in pending:
                log.debug(f"pending: {describe(m)}")
            apply_migrations(bind)

        seed_data(db, user_manager, role_manager, rng or random.Random())
    except Exception:
        db.rollback()
        log.exception("--- DB: An error occurred while initializing the database ---")
        raise

    log.info("--- DB: Database initialization completed successfully. ---")


def seed_data(db, user_manager, role_manager, rng):
    seed_permissions(db)
    seed_roles(role_manager)
    seed_users(user_manager)
    seed_user_details(db, rng)


def seed_permissions(db: Session):
    if db.query(Permission.id).first() is not None:
        log.info("--- INIT: Permissions already present, skipping. ---")
        return

    db.add_all([Permission(name=name, description=name) for name in PERMISSIONS])
    db.commit()
    log.info(f"--- INIT: {len(PERMISSIONS)} permissions created. ---")


def seed_roles(role_manager: RoleManager):
    if role_manager.roles.first() is not None:
        log.info("--- INIT: Roles already present, skipping. ---")
        return

    for name, permissions in ROLES.items():
        role = Role(name=name)
        ok, errors = role_manager.create(role)
        if not ok:
            log.warning(f"--- INIT: Role '{name}' rejected: {'; '.join(errors)} ---")
            continue

        for permission in permissions:
            ok, errors = role_manager.add_permission(role, permission)
            if not ok:
                log.warning(f"--- INIT: {'; '.join(errors)} ---")

        log.info(f"--- INIT: Role '{name}' created with {len(permissions)} permissions. ---")


def seed_users(user_manager: UserManager):
    if user_manager.users.first() is not None:
        log.info("--- INIT: Users already present, skipping. ---")
        return

    for data in USERS:
        user = User(
            full_name=data["full_name"],
            user_name=data["email"],
            email=data["email"],
            email_confirmed=True,
            phone_number=data["phone"],
            phone_number_confirmed=True,
        )
        # the manager validates and hashes the password itself
        ok, errors = user_manager.create(user, SEED_PASSWORD)
        if not ok:
            log.warning(f"--- INIT: User '{data['email']}' rejected: {'; '.join(errors)} ---")
            continue

        ok, errors = user_manager.add_to_role(user, data["role"])
        if not ok:
            log.warning(f"--- INIT: {'; '.join(errors)} ---")


def seed_user_details(db: Session, rng=None):
    if db.query(UserDetail.id).first() is not None:
        log.info("--- INIT: User details already present, skipping. ---")
        return

    rng = rng or random.Random()
    users = db.query(User).all()

    for user in users:
        details = UserDetail(
            user_id=user.id,
            birthdate=random_birthdate(rng),
            address=f"{rng.randint(1, 999)} {rng.choice(STREETS)} St",
            user_type_id=rng.randint(1, 3),
            gender_id=rng.randint(1, 2),
            identity_number=f"ID-{rng.randint(100000, 999999)}",
            nationality_id=rng.randint(1, 19),
        )

        handle = "@" + (user.user_name or "").split("@")[0]
        details.set_extra(UserExtra(
            interests=random_interests(rng),
            preferences=Preferences(theme=rng.choice(["Light", "Dark"]), notifications=True),
            social_media=SocialMedia(twitter=handle, instagram=handle),
        ))
        db.add(details)

    db.commit()
    log.info(f"--- INIT: Details generated for {len(users)} users. ---")


def random_birthdate(rng, now=None):
    """Somewhere between 18 and 60 years back"""
    now = now or datetime.now()
    years = rng.randint(MIN_AGE, MAX_AGE)
    try:
        born = now.replace(year=now.year - years)
    except ValueError:
        # Feb 29 in a non-leap year
        born = now.replace(year=now.year - years, day=28)
    return born - timedelta(days=rng.randint(0, 364))


def random_interests(rng):
    return rng.sample(INTERESTS, rng.randint(2, 4))


# === STARTUP ===

def wait_for_db(retries=DB_CONNECT_RETRIES, delay=DB_CONNECT_DELAY):
    """Probes the database until it answers"""
    last_error = None
    for attempt in range(1, retries + 1):
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            log.info("--- DB: Connected. ---")
            return
        except Exception as e:
            last_error = e
            log.warning(f"--- DB Not ready ({attempt}/{retries}): {e}. Retrying in {delay}s... ---")
            time.sleep(delay)

    raise RuntimeError(f"Could not connect to the database after {retries} attempts") from last_error


def seed_database():
    """Startup entry point: migrate + seed, stop the app on failure"""
    db = SessionLocal()
    try:
        wait_for_db()
        initialize(db, UserManager(db), RoleManager(db))
    except Exception:
        log.error("--- DB: Seeding failed, aborting startup ---")
        raise
    finally:
        db.close()
        SessionLocal.remove()


# === MANUAL RUN ===
if __name__ == "__main__":
    log.info("Starting manual DB initialization...")
    seed_database()
    log.info("Initialization script finished.")
