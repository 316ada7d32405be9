"""Unit tests for FakeUserRepository: verifies Port contract compliance."""

import unittest
from datetime import datetime, timedelta, timezone

from adapter.fake.user_repository import FakeUserRepository
from domain.model.errors import ConflictError, ValidationError
from domain.model.user import User, UserRole


class TestFakeUserRepository(unittest.TestCase):

    def setUp(self):
        self.repo = FakeUserRepository()
        self.user = self.repo.create(email='jonas@natours.io', password_hash='$2b$04$hash', name='Jonas')

    # ── create ────────────────────────────────────────────────

    def test_create_returns_user_without_hash(self):
        self.assertIsInstance(self.user, User)
        self.assertIsNone(self.user.password_hash)
        self.assertEqual(self.user.role, UserRole.USER)
        self.assertEqual(self.repo.store[self.user.id].password_hash, '$2b$04$hash')

    def test_create_duplicate_email_raises(self):
        with self.assertRaises(ConflictError):
            self.repo.create(email='jonas@natours.io', password_hash='$2b$04$other')

    # ── reads ─────────────────────────────────────────────────

    def test_hash_only_on_demand(self):
        self.assertIsNone(self.repo.find_by_email('jonas@natours.io').password_hash)
        self.assertEqual(
            self.repo.find_by_email('jonas@natours.io', include_hash=True).password_hash, '$2b$04$hash',
        )
        self.assertIsNone(self.repo.get_by_id(self.user.id).password_hash)
        self.assertEqual(self.repo.get_by_id(self.user.id, include_hash=True).password_hash, '$2b$04$hash')

    def test_missing_returns_none(self):
        self.assertIsNone(self.repo.find_by_email('nobody@natours.io'))
        self.assertIsNone(self.repo.get_by_id('nonexistent'))

    def test_reads_are_copies(self):
        user = self.repo.get_by_id(self.user.id)
        user.name = 'Changed'
        self.assertEqual(self.repo.get_by_id(self.user.id).name, 'Jonas')

    # ── save ──────────────────────────────────────────────────

    def test_save_without_hash_keeps_stored_hash(self):
        user = self.repo.get_by_id(self.user.id)
        user.name = 'Jonas S.'

        self.assertTrue(self.repo.save(user))
        self.assertEqual(self.repo.store[self.user.id].password_hash, '$2b$04$hash')
        self.assertEqual(self.repo.store[self.user.id].name, 'Jonas S.')

    def test_save_validates_unless_skipped(self):
        user = self.repo.get_by_id(self.user.id)
        user.password_reset_token = 'half-set'

        with self.assertRaises(ValidationError):
            self.repo.save(user)
        self.assertTrue(self.repo.save(user, skip_validation=True))

    def test_save_with_email_of_another_user_raises(self):
        self.repo.create(email='other@natours.io', password_hash='$2b$04$other')
        user = self.repo.get_by_id(self.user.id)
        user.email = 'other@natours.io'

        with self.assertRaises(ConflictError):
            self.repo.save(user)
        self.assertEqual(self.repo.store[self.user.id].email, 'jonas@natours.io')

    def test_save_keeping_own_email_is_not_a_conflict(self):
        user = self.repo.get_by_id(self.user.id)
        self.assertTrue(self.repo.save(user))

    def test_save_unknown_user_returns_false(self):
        user = self.repo.get_by_id(self.user.id)
        user.id = 'ghost'
        self.assertFalse(self.repo.save(user))

    # ── find_by_reset_token ───────────────────────────────────

    def test_find_by_reset_token_respects_expiry(self):
        now = datetime.now(timezone.utc)
        user = self.repo.get_by_id(self.user.id)
        user.set_reset_token('token-hash', now + timedelta(minutes=10))
        self.repo.save(user)

        self.assertEqual(self.repo.find_by_reset_token('token-hash', now).id, self.user.id)
        self.assertIsNone(self.repo.find_by_reset_token('token-hash', now + timedelta(minutes=11)))
        self.assertIsNone(self.repo.find_by_reset_token('other-hash', now))


if __name__ == '__main__':
    unittest.main()
