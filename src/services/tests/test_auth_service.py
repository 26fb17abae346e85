"""Unit tests for auth_service module."""

import unittest
from datetime import timedelta
from unittest.mock import MagicMock

from adapter.fake.user_repository import FakeUserRepository
from domain.model.errors import (
    DuplicateError,
    InvalidCredentialsError,
    NotFoundError,
    TokenExpiredError,
    TokenInvalidError,
    ValidationError,
)
from domain.model.token import TokenType
from domain.model.user import Role
from services import auth_service
from services.password_hasher import verify_password
from services.token_service import TokenIssuer
from utils.config import AuthSettings

TEST_ROUNDS = 4
AUTH_SETTINGS = AuthSettings(
    jwt_secret="test-access-secret",
    jwt_refresh_secret="test-refresh-secret",
    bcrypt_rounds=TEST_ROUNDS,
)


def _register(repo, issuer, **overrides):
    data = {
        "username": "alice",
        "email": "a@x.com",
        "password": "secret1",
    }
    data.update(overrides)
    return auth_service.register(repo, issuer, rounds=TEST_ROUNDS, **data)


class TestRegister(unittest.TestCase):
    """Test register function."""

    def setUp(self):
        self.repo = FakeUserRepository()
        self.issuer = TokenIssuer(AUTH_SETTINGS)

    def test_register_success(self):
        user, tokens = _register(self.repo, self.issuer, first_name="Alice", last_name="Liddell")

        self.assertEqual(user.username, "alice")
        self.assertEqual(user.email, "a@x.com")
        self.assertEqual(user.first_name, "Alice")
        self.assertEqual(user.last_name, "Liddell")
        self.assertEqual(user.role, Role.USER)
        self.assertTrue(user.is_active)
        self.assertIsNone(user.last_login)
        self.assertIsNotNone(self.repo.get_by_id(user.id))

    def test_register_stores_hash_not_plaintext(self):
        user, _ = _register(self.repo, self.issuer)

        stored = self.repo.get_by_id(user.id)
        self.assertNotEqual(stored.password_hash, "secret1")
        self.assertTrue(verify_password("secret1", stored.password_hash))

    def test_register_issues_valid_token_pair(self):
        user, tokens = _register(self.repo, self.issuer)

        access = self.issuer.verify(tokens.access_token, TokenType.ACCESS)
        refresh = self.issuer.verify(tokens.refresh_token, TokenType.REFRESH)

        self.assertEqual(access.user_id, user.id)
        self.assertEqual(access.email, "a@x.com")
        self.assertEqual(access.role, "user")
        self.assertEqual(refresh.user_id, user.id)

    def test_register_normalizes_email(self):
        user, _ = _register(self.repo, self.issuer, email="  Alice@Example.COM ")
        self.assertEqual(user.email, "alice@example.com")

    def test_register_duplicate_email(self):
        _register(self.repo, self.issuer)

        with self.assertRaises(DuplicateError) as ctx:
            _register(self.repo, self.issuer, username="alice2")
        self.assertIn("Email", str(ctx.exception))

    def test_register_duplicate_email_differs_only_in_case(self):
        _register(self.repo, self.issuer)

        with self.assertRaises(DuplicateError):
            _register(self.repo, self.issuer, username="alice2", email="A@X.COM")

    def test_register_duplicate_username(self):
        _register(self.repo, self.issuer)

        with self.assertRaises(DuplicateError) as ctx:
            _register(self.repo, self.issuer, email="other@x.com")
        self.assertIn("Username", str(ctx.exception))

    def test_register_race_is_resolved_by_store(self):
        """A duplicate the pre-check misses is still rejected by the store."""
        repo = MagicMock()
        repo.get_by_email.return_value = None
        repo.get_by_username.return_value = None
        repo.create.side_effect = DuplicateError("Username or email already registered")

        with self.assertRaises(DuplicateError):
            _register(repo, self.issuer)

    def test_register_short_username(self):
        with self.assertRaises(ValidationError):
            _register(self.repo, self.issuer, username="al")

    def test_register_username_with_spaces(self):
        with self.assertRaises(ValidationError):
            _register(self.repo, self.issuer, username="alice smith")

    def test_register_invalid_email(self):
        with self.assertRaises(ValidationError):
            _register(self.repo, self.issuer, email="not-an-email")

    def test_register_short_password(self):
        with self.assertRaises(ValidationError):
            _register(self.repo, self.issuer, password="123")
        self.assertEqual(self.repo.store, {})


class TestAuthenticate(unittest.TestCase):
    """Test authenticate function."""

    def setUp(self):
        self.repo = FakeUserRepository()
        self.issuer = TokenIssuer(AUTH_SETTINGS)
        self.user, _ = _register(self.repo, self.issuer)

    def test_login_by_email(self):
        user, tokens = auth_service.authenticate(self.repo, self.issuer, "a@x.com", "secret1")

        self.assertEqual(user.id, self.user.id)
        self.assertEqual(self.issuer.verify(tokens.access_token).user_id, self.user.id)

    def test_login_by_email_is_case_insensitive(self):
        user, _ = auth_service.authenticate(self.repo, self.issuer, "A@X.com", "secret1")
        self.assertEqual(user.id, self.user.id)

    def test_login_by_username(self):
        user, _ = auth_service.authenticate(self.repo, self.issuer, "alice", "secret1")
        self.assertEqual(user.id, self.user.id)

    def test_wrong_password(self):
        with self.assertRaises(InvalidCredentialsError):
            auth_service.authenticate(self.repo, self.issuer, "a@x.com", "wrong")

    def test_unknown_and_wrong_password_are_indistinguishable(self):
        with self.assertRaises(InvalidCredentialsError) as unknown:
            auth_service.authenticate(self.repo, self.issuer, "nobody@x.com", "secret1")
        with self.assertRaises(InvalidCredentialsError) as wrong:
            auth_service.authenticate(self.repo, self.issuer, "a@x.com", "wrong")

        self.assertEqual(str(unknown.exception), str(wrong.exception))
        self.assertIs(type(unknown.exception), type(wrong.exception))

    def test_login_does_not_touch_last_login(self):
        user, _ = auth_service.authenticate(self.repo, self.issuer, "a@x.com", "secret1")
        self.assertIsNone(self.repo.get_by_id(user.id).last_login)


class TestProfileAndLogout(unittest.TestCase):
    """Test get_profile and logout functions."""

    def setUp(self):
        self.repo = FakeUserRepository()
        self.issuer = TokenIssuer(AUTH_SETTINGS)

    def test_get_profile(self):
        user, _ = _register(self.repo, self.issuer)

        profile = auth_service.get_profile(self.repo, user.id)

        self.assertEqual(profile.username, "alice")

    def test_get_profile_missing_user(self):
        with self.assertRaises(NotFoundError):
            auth_service.get_profile(self.repo, "gone")

    def test_logout_is_noop(self):
        user, tokens = _register(self.repo, self.issuer)

        self.assertIsNone(auth_service.logout(user.id))
        # No revocation: the token still verifies
        self.assertEqual(self.issuer.verify(tokens.access_token).user_id, user.id)


class TestRefresh(unittest.TestCase):
    """Test refresh function."""

    def setUp(self):
        self.repo = FakeUserRepository()
        self.issuer = TokenIssuer(AUTH_SETTINGS)
        self.user, self.tokens = _register(self.repo, self.issuer)

    def test_refresh_issues_new_pair(self):
        tokens = auth_service.refresh(self.repo, self.issuer, self.tokens.refresh_token)

        access = self.issuer.verify(tokens.access_token, TokenType.ACCESS)
        refresh = self.issuer.verify(tokens.refresh_token, TokenType.REFRESH)
        self.assertEqual(access.user_id, self.user.id)
        self.assertEqual(access.email, self.user.email)
        self.assertEqual(refresh.user_id, self.user.id)

    def test_refresh_rejects_access_token(self):
        with self.assertRaises(TokenInvalidError):
            auth_service.refresh(self.repo, self.issuer, self.tokens.access_token)

    def test_refresh_rejects_garbage(self):
        with self.assertRaises(TokenInvalidError):
            auth_service.refresh(self.repo, self.issuer, "garbage")

    def test_refresh_rejects_expired_token(self):
        expired_issuer = TokenIssuer(AuthSettings(
            jwt_secret=AUTH_SETTINGS.jwt_secret,
            jwt_refresh_secret=AUTH_SETTINGS.jwt_refresh_secret,
            refresh_token_ttl=timedelta(seconds=-10),
        ))
        token = expired_issuer.issue_refresh(self.user.id)

        with self.assertRaises(TokenExpiredError):
            auth_service.refresh(self.repo, self.issuer, token)

    def test_refresh_for_deleted_user(self):
        del self.repo.store[self.user.id]

        with self.assertRaises(TokenInvalidError):
            auth_service.refresh(self.repo, self.issuer, self.tokens.refresh_token)


class TestChangePassword(unittest.TestCase):
    """Test change_password function."""

    def setUp(self):
        self.repo = FakeUserRepository()
        self.issuer = TokenIssuer(AUTH_SETTINGS)
        self.user, _ = _register(self.repo, self.issuer)

    def test_change_password_rehashes(self):
        old_hash = self.repo.get_by_id(self.user.id).password_hash

        auth_service.change_password(self.repo, self.user.id, "secret1", "newsecret", rounds=TEST_ROUNDS)

        new_hash = self.repo.get_by_id(self.user.id).password_hash
        self.assertNotEqual(new_hash, old_hash)
        self.assertNotEqual(new_hash, "newsecret")
        self.assertTrue(verify_password("newsecret", new_hash))

    def test_change_password_to_same_secret_gets_new_hash(self):
        old_hash = self.repo.get_by_id(self.user.id).password_hash

        auth_service.change_password(self.repo, self.user.id, "secret1", "secret1", rounds=TEST_ROUNDS)

        self.assertNotEqual(self.repo.get_by_id(self.user.id).password_hash, old_hash)

    def test_login_uses_new_password(self):
        auth_service.change_password(self.repo, self.user.id, "secret1", "newsecret", rounds=TEST_ROUNDS)

        with self.assertRaises(InvalidCredentialsError):
            auth_service.authenticate(self.repo, self.issuer, "a@x.com", "secret1")
        user, _ = auth_service.authenticate(self.repo, self.issuer, "a@x.com", "newsecret")
        self.assertEqual(user.id, self.user.id)

    def test_wrong_current_password(self):
        with self.assertRaises(InvalidCredentialsError):
            auth_service.change_password(self.repo, self.user.id, "wrong", "newsecret", rounds=TEST_ROUNDS)

    def test_invalid_new_password(self):
        with self.assertRaises(ValidationError):
            auth_service.change_password(self.repo, self.user.id, "secret1", "123", rounds=TEST_ROUNDS)

    def test_missing_user(self):
        with self.assertRaises(NotFoundError):
            auth_service.change_password(self.repo, "gone", "secret1", "newsecret", rounds=TEST_ROUNDS)


if __name__ == '__main__':
    unittest.main()
