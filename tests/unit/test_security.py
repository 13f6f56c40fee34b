"""Tests for the token adapter and settings."""

from datetime import timedelta

from jose import jwt

from backoffice.core.config import Settings, get_settings
from backoffice.core.security import (
    Principal,
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)


class TestAccessToken:

    def test_round_trip(self):
        token = create_access_token("admin", "SYSTEM_ADMIN")
        assert decode_access_token(token) == Principal(subject="admin", role_code="SYSTEM_ADMIN")

    def test_expired_token(self):
        token = create_access_token("admin", "SYSTEM_ADMIN", expires_delta=timedelta(seconds=-5))
        assert decode_access_token(token) is None

    def test_garbage_token(self):
        assert decode_access_token("not-a-token") is None

    def test_wrong_signature(self):
        settings = get_settings()
        token = jwt.encode({"sub": "admin", "role": "SYSTEM_ADMIN", "type": "access"},
                           "another-secret", algorithm=settings.algorithm)
        assert decode_access_token(token) is None

    def test_refresh_type_rejected(self):
        settings = get_settings()
        token = jwt.encode({"sub": "admin", "role": "SYSTEM_ADMIN", "type": "refresh"},
                           settings.secret_key, algorithm=settings.algorithm)
        assert decode_access_token(token) is None

    def test_missing_role_claim(self):
        settings = get_settings()
        token = jwt.encode({"sub": "admin", "type": "access"},
                           settings.secret_key, algorithm=settings.algorithm)
        assert decode_access_token(token) is None


class TestSettings:

    def test_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.admin_login_id == "admin"
        assert settings.migration_enabled is True
        assert settings.migration_lock_name == "cms_role_migration"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("ADMIN_LOGIN_ID", "root")
        monkeypatch.setenv("MIGRATION_ENABLED", "false")
        settings = Settings(_env_file=None)
        assert settings.admin_login_id == "root"
        assert settings.migration_enabled is False


class TestPasswordHash:

    def test_verify(self):
        hashed = get_password_hash("1234")
        assert hashed != "1234"
        assert verify_password("1234", hashed)
        assert not verify_password("4321", hashed)
