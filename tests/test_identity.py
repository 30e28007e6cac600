"""
Tests for password rules and the user / role managers
"""

from authdesk.identity import PasswordPolicy, hash_password, verify_password, normalize
from authdesk.models import User, Role, Permission, RolePermission


def new_user(name="carol", email=None):
    email = email or f"{name}@example.com"
    return User(user_name=email, email=email, full_name=name)


class TestPasswords:
    def test_policy_accepts_valid_password(self):
        assert PasswordPolicy(min_length=8).validate("Password123!") == []

    def test_policy_rejects_short_and_digitless(self):
        errors = PasswordPolicy(min_length=8).validate("short")
        assert len(errors) == 2

    def test_policy_rejects_missing_digit(self):
        errors = PasswordPolicy(min_length=8).validate("longenough")
        assert errors == ["Password must contain at least one digit."]

    def test_hash_and_verify(self):
        hashed = hash_password("Password123!", rounds=4)
        assert hashed != "Password123!"
        assert verify_password("Password123!", hashed)
        assert not verify_password("wrong", hashed)

    def test_verify_handles_garbage(self):
        assert not verify_password("x", None)
        assert not verify_password("x", "not-a-bcrypt-hash")

    def test_normalize(self):
        assert normalize(" admin@example.com ") == "ADMIN@EXAMPLE.COM"
        assert normalize(None) is None


class TestUserManager:
    def test_create_fills_identity_fields(self, user_manager):
        user = new_user()
        ok, errors = user_manager.create(user, "Password123!")

        assert ok and errors == []
        assert user.id is not None
        assert user.normalized_user_name == "CAROL@EXAMPLE.COM"
        assert user.normalized_email == "CAROL@EXAMPLE.COM"
        assert user.security_stamp
        assert user_manager.check_password(user, "Password123!")

    def test_create_rejects_weak_password(self, user_manager, db):
        ok, errors = user_manager.create(new_user(), "weak")
        assert not ok
        assert errors
        assert db.query(User).count() == 0

    def test_create_rejects_duplicate_email(self, user_manager):
        user_manager.create(new_user("dave", "same@example.com"), "Password123!")
        duplicate = User(user_name="other", email="SAME@example.com", full_name="x")
        ok, errors = user_manager.create(duplicate, "Password123!")
        assert not ok
        assert "already taken" in errors[0]

    def test_create_rejects_duplicate_user_name(self, user_manager):
        user_manager.create(new_user("erin"), "Password123!")
        ok, errors = user_manager.create(
            User(user_name="ERIN@example.com", email="erin2@example.com", full_name="erin"), "Password123!"
        )
        assert not ok

    def test_find_is_case_insensitive(self, user_manager):
        user = new_user("frank")
        user_manager.create(user, "Password123!")
        assert user_manager.find_by_email("FRANK@EXAMPLE.com") is user
        assert user_manager.find_by_name("frank@example.COM") is user

    def test_add_to_role(self, user_manager, role_manager):
        role_manager.create(Role(name="Manager"))
        user = new_user()
        user_manager.create(user, "Password123!")

        ok, _ = user_manager.add_to_role(user, "manager")
        assert ok
        assert user_manager.get_roles(user) == ["Manager"]

        ok, errors = user_manager.add_to_role(user, "Manager")
        assert not ok
        assert "already" in errors[0]

    def test_add_to_unknown_role(self, user_manager):
        user = new_user()
        user_manager.create(user, "Password123!")
        ok, errors = user_manager.add_to_role(user, "Ghost")
        assert not ok
        assert "does not exist" in errors[0]


class TestRoleManager:
    def test_create_normalizes(self, role_manager):
        role = Role(name="Admin", description="Everything")
        ok, _ = role_manager.create(role)
        assert ok
        assert role.normalized_name == "ADMIN"
        assert role_manager.find_by_name("admin") is role

    def test_create_rejects_duplicate(self, role_manager):
        role_manager.create(Role(name="Admin"))
        ok, errors = role_manager.create(Role(name="ADMIN"))
        assert not ok
        assert role_manager.roles.count() == 1

    def test_add_permission(self, role_manager, db):
        db.add(Permission(name="CanViewUser"))
        db.commit()
        role = Role(name="Admin")
        role_manager.create(role)

        ok, _ = role_manager.add_permission(role, "CanViewUser")
        assert ok
        assert db.query(RolePermission).count() == 1

        ok, _ = role_manager.add_permission(role, "CanViewUser")
        assert not ok
        ok, errors = role_manager.add_permission(role, "CanFly")
        assert not ok
        assert "does not exist" in errors[0]
