"""Tests for the exception handlers registered on the app."""

import unittest

from fastapi.testclient import TestClient

from adapter.fake.user_repository import FakeUserRepository
from api.dependencies import get_auth_service, get_user_repo
from api.main import app
from domain.model.errors import ConflictError, DomainError, InternalError
from utils.config import Settings, get_settings

DEV_SETTINGS = Settings(jwt_secret_key='errors-test-secret', environment='development')
PROD_SETTINGS = Settings(jwt_secret_key='errors-test-secret', environment='production')


class _ExplodingService:
    def __init__(self, error: Exception):
        self.error = error

    def login(self, email, password):
        raise self.error


class ErrorHandlerTestCase(unittest.TestCase):

    def setUp(self):
        self.client = TestClient(app, raise_server_exceptions=False)
        app.dependency_overrides[get_user_repo] = FakeUserRepository

    def tearDown(self):
        app.dependency_overrides.clear()

    def _login_raising(self, error: Exception):
        app.dependency_overrides[get_auth_service] = lambda: _ExplodingService(error)
        return self.client.post('/api/v1/users/login', json={'email': 'a@x.com', 'password': 'secret123'})


class TestProductionMode(ErrorHandlerTestCase):

    def setUp(self):
        super().setUp()
        app.dependency_overrides[get_settings] = lambda: PROD_SETTINGS

    def test_operational_error_keeps_message(self):
        response = self._login_raising(ConflictError("Duplicate field value: 'a@x.com'. Please use another value!"))

        assert response.status_code == 409
        assert response.json() == {
            'status': 'fail',
            'message': "Duplicate field value: 'a@x.com'. Please use another value!",
        }

    def test_internal_error_is_masked(self):
        response = self._login_raising(InternalError('collection users is locked'))

        assert response.status_code == 500
        assert response.json() == {'status': 'error', 'message': 'Something went very wrong!'}

    def test_unexpected_exception_is_masked(self):
        response = self._login_raising(RuntimeError('driver exploded'))

        assert response.status_code == 500
        assert response.json() == {'status': 'error', 'message': 'Something went very wrong!'}

    def test_unknown_route(self):
        response = self.client.get('/api/v2/tours')

        assert response.status_code == 404
        assert response.json() == {'status': 'fail', 'message': "Can't find /api/v2/tours on this server!"}

    def test_method_not_allowed_keeps_status(self):
        response = self.client.delete('/api/v1/users/login')

        assert response.status_code == 405
        assert response.json()['status'] == 'fail'
        assert response.headers['allow'] == 'POST'

    def test_unauthenticated_response_carries_challenge(self):
        response = self.client.get('/api/v1/users/me')

        assert response.status_code == 401
        assert response.headers['www-authenticate'] == 'Bearer'


class TestDevelopmentMode(ErrorHandlerTestCase):

    def setUp(self):
        super().setUp()
        app.dependency_overrides[get_settings] = lambda: DEV_SETTINGS

    def test_unexpected_exception_shows_detail(self):
        response = self._login_raising(RuntimeError('driver exploded'))

        assert response.status_code == 500
        data = response.json()
        assert data['status'] == 'error'
        assert data['message'] == 'driver exploded'
        assert data['error'] == {'type': 'RuntimeError', 'detail': 'driver exploded'}
        assert 'RuntimeError' in data['stack']

    def test_development_mode_follows_settings_override(self):
        app.dependency_overrides[get_settings] = lambda: PROD_SETTINGS

        response = self._login_raising(RuntimeError('driver exploded'))

        assert 'stack' not in response.json()

    def test_operational_error_includes_stack(self):
        response = self._login_raising(DomainError('plain failure'))

        assert response.status_code == 500
        assert response.json()['message'] == 'plain failure'
        assert 'stack' in response.json()


class TestErrorStatus(unittest.TestCase):

    def test_status_by_class(self):
        assert ConflictError().status == 'fail'
        assert InternalError().status == 'error'
        assert not InternalError.is_operational


if __name__ == '__main__':
    unittest.main()
