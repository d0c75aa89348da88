"""Custom decorators and helpers for authorization."""
from functools import wraps
from typing import Optional

from flask import current_app, g
from flask_jwt_extended import create_access_token, get_jwt, get_jwt_identity, verify_jwt_in_request

from rollcall.errors import Forbidden, InvalidCredential
from rollcall.models.instructor import Instructor
from rollcall.services.identity_service import Identity

ROLE_INSTRUCTOR = 'instructor'
ROLE_STUDENT = 'student'


def get_identity_verifier():
    return current_app.extensions['identity_verifier']


def instructor_required(f):
    """Decorator to require an instructor access token."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        verify_jwt_in_request()
        if get_jwt().get('role') != ROLE_INSTRUCTOR:
            raise Forbidden()

        instructor = Instructor.get_by_id(get_jwt_identity())
        if not instructor or not instructor.is_active:
            raise Forbidden('Instructor account is not active')

        g.instructor = instructor
        return f(*args, **kwargs)
    return decorated_function


def create_student_session(identity: Identity) -> str:
    """Server-signed session token carrying a verified identity."""
    return create_access_token(
        identity=identity.subject_id,
        additional_claims={
            'role': ROLE_STUDENT,
            'name': identity.name,
            'email': identity.email,
            'picture': identity.avatar_url,
        },
        expires_delta=current_app.config.get('STUDENT_SESSION_EXPIRES')
    )


def session_identity() -> Optional[Identity]:
    """Identity from a student session bearer token, if one was sent."""
    verify_jwt_in_request(optional=True)
    claims = get_jwt()
    if not claims or claims.get('role') != ROLE_STUDENT:
        return None
    return Identity(
        subject_id=get_jwt_identity(),
        name=claims.get('name'),
        email=claims.get('email'),
        avatar_url=claims.get('picture')
    )


def resolve_student_identity(credential: str = None) -> Identity:
    """Verify a fresh ID token, or fall back to the student session."""
    if credential:
        return get_identity_verifier().verify(credential)

    identity = session_identity()
    if identity is None:
        raise InvalidCredential('Please sign in to continue.')
    return identity


def current_role() -> Optional[str]:
    verify_jwt_in_request(optional=True)
    claims = get_jwt()
    return claims.get('role') if claims else None
