"""Shared fixtures: app, client, instructor, and signed ID tokens."""
import time

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa

from rollcall import create_app, db
from rollcall.models.instructor import Instructor
from rollcall.services.batch_service import BatchService
from rollcall.services.identity_service import Identity, IdentityVerifier

CLIENT_ID = 'test-client-id.apps.googleusercontent.com'
ISSUER = 'https://accounts.google.com'


@pytest.fixture(scope='session')
def signing_key():
    """RSA key standing in for the identity provider's signing key."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope='session')
def other_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def verifier(signing_key):
    return IdentityVerifier(
        audience=CLIENT_ID,
        issuers=['accounts.google.com', ISSUER],
        key_resolver=lambda credential: signing_key.public_key()
    )


@pytest.fixture
def app(verifier):
    """Create test app."""
    app = create_app('testing')
    app.extensions['identity_verifier'] = verifier
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def make_credential(signing_key):
    """Build a signed Google-style ID token."""
    def _make(sub='google-sub-1', name='Test Student', email='student@example.com',
              picture='https://example.com/avatar.png', key=None, expires_in=3600,
              **overrides):
        now = int(time.time())
        claims = {
            'iss': ISSUER,
            'aud': CLIENT_ID,
            'sub': sub,
            'name': name,
            'email': email,
            'email_verified': True,
            'picture': picture,
            'iat': now,
            'exp': now + expires_in,
        }
        claims.update(overrides)
        return jwt.encode(claims, key or signing_key, algorithm='RS256')
    return _make


@pytest.fixture
def identity():
    return Identity(
        subject_id='google-sub-1',
        name='Test Student',
        email='student@example.com',
        avatar_url='https://example.com/avatar.png'
    )


@pytest.fixture
def instructor(app):
    instructor = Instructor(email='lecturer@example.com', name='Test Instructor')
    instructor.set_password('password123')
    return instructor.save()


@pytest.fixture
def instructor_headers(client, instructor):
    response = client.post('/api/auth/login', json={
        'email': 'lecturer@example.com',
        'password': 'password123'
    })
    token = response.get_json()['data']['access_token']
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def batch(app, instructor):
    return BatchService.create_batch('ABC College', name='BATCH_B1', created_by=instructor.id)


@pytest.fixture
def other_batch(app, instructor):
    return BatchService.create_batch('ABC College', name='BATCH_B2', created_by=instructor.id)
