"""Unit tests for TokenIssuer: signing, expiry and tamper detection."""

import unittest
from datetime import datetime, timedelta, timezone

from jose import jwt

from domain.model.errors import AuthenticationError, InvalidTokenError, TokenExpiredError
from services.token_issuer import TokenIssuer


class TestTokenIssuer(unittest.TestCase):

    def setUp(self):
        self.issuer = TokenIssuer(secret='unit-test-secret', expires_in=timedelta(days=1))

    def test_round_trip_returns_user_id_and_issued_at(self):
        issued_at = datetime(2020, 1, 1, 8, 30, tzinfo=timezone.utc)
        issuer = TokenIssuer(secret='unit-test-secret', expires_in=timedelta(days=36500))

        claims = issuer.verify(issuer.issue('user-1', issued_at=issued_at))

        self.assertEqual(claims.user_id, 'user-1')
        self.assertEqual(claims.issued_at, issued_at)

    def test_issued_at_keeps_milliseconds(self):
        issued_at = datetime(2020, 1, 1, 8, 30, 15, 123456, tzinfo=timezone.utc)
        issuer = TokenIssuer(secret='unit-test-secret', expires_in=timedelta(days=36500))

        claims = issuer.verify(issuer.issue('user-1', issued_at=issued_at))

        self.assertEqual(claims.issued_at, issued_at.replace(microsecond=123000))

    def test_whole_second_iat_is_accepted(self):
        now = datetime.now(timezone.utc).replace(microsecond=0)
        token = jwt.encode(
            {'sub': 'user-1', 'iat': now, 'exp': now + timedelta(hours=1)},
            'unit-test-secret', algorithm='HS256',
        )

        self.assertEqual(self.issuer.verify(token).issued_at, now)

    def test_defaults_issued_at_to_now(self):
        before = datetime.now(timezone.utc).replace(microsecond=0)
        claims = self.issuer.verify(self.issuer.issue('user-1'))
        self.assertGreaterEqual(claims.issued_at, before)

    def test_expired_token_fails_distinctly(self):
        token = self.issuer.issue('user-1', issued_at=datetime.now(timezone.utc) - timedelta(days=2))

        with self.assertRaises(TokenExpiredError) as ctx:
            self.issuer.verify(token)
        self.assertEqual(ctx.exception.status_code, 401)

    def test_wrong_secret_is_invalid(self):
        token = TokenIssuer(secret='another-secret').issue('user-1')

        with self.assertRaises(InvalidTokenError):
            self.issuer.verify(token)

    def test_garbage_is_invalid(self):
        with self.assertRaises(InvalidTokenError):
            self.issuer.verify('loggedout')

    def test_missing_subject_is_invalid(self):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {'iat': now, 'exp': now + timedelta(hours=1)}, 'unit-test-secret', algorithm='HS256',
        )
        with self.assertRaises(InvalidTokenError):
            self.issuer.verify(token)

    def test_expired_and_invalid_are_both_authentication_errors(self):
        self.assertTrue(issubclass(TokenExpiredError, AuthenticationError))
        self.assertTrue(issubclass(InvalidTokenError, AuthenticationError))
        self.assertNotEqual(TokenExpiredError().message, InvalidTokenError().message)

    def test_empty_secret_is_rejected(self):
        with self.assertRaises(ValueError):
            TokenIssuer(secret='')


if __name__ == '__main__':
    unittest.main()
