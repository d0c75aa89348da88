"""Authentication API: instructor login and student sessions."""
import logging

from flask import Blueprint, request
from flask_jwt_extended import create_access_token, get_jwt, get_jwt_identity, jwt_required

from rollcall import db, limiter
from rollcall.errors import InvalidCredential
from rollcall.models.instructor import Instructor
from rollcall.utils.dates import utcnow
from rollcall.utils.decorators import (
    ROLE_INSTRUCTOR, ROLE_STUDENT, create_student_session, get_identity_verifier
)
from rollcall.utils.helpers import success_response
from rollcall.utils.validators import Validator

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__)


@auth_bp.route("/health", methods=["GET"])
def health_check():
    """Health check endpoint."""
    return success_response(message="Auth service is running")


@auth_bp.route("/login", methods=["POST"])
@limiter.limit("5 per minute")
def login():
    """Instructor login with email and password."""
    data = Validator.require(request.get_json(silent=True), ["email", "password"])

    email = str(data["email"]).lower().strip()
    instructor = Instructor.query.filter_by(email=email).first()

    if not instructor or not instructor.check_password(str(data["password"])):
        logger.info("Failed instructor login for %s", email)
        raise InvalidCredential("Invalid email or password")

    if not instructor.is_active:
        raise InvalidCredential("Account is deactivated")

    instructor.last_login = utcnow()
    db.session.commit()

    access_token = create_access_token(
        identity=instructor.id,
        additional_claims={"role": ROLE_INSTRUCTOR}
    )

    return success_response(
        data={
            "access_token": access_token,
            "instructor": instructor.to_dict()
        },
        message="Login successful"
    )


@auth_bp.route("/session", methods=["POST"])
@limiter.limit("20 per minute")
def student_session():
    """Exchange a Google ID token for a student session token."""
    data = Validator.require(request.get_json(silent=True), ["credential"])

    identity = get_identity_verifier().verify(data["credential"])

    return success_response(
        data={
            "session_token": create_student_session(identity),
            "identity": identity.to_dict()
        },
        message="Signed in"
    )


@auth_bp.route("/me", methods=["GET"])
@jwt_required()
def get_current_principal():
    """Return the signed-in instructor or student."""
    claims = get_jwt()

    if claims.get("role") == ROLE_INSTRUCTOR:
        instructor = Instructor.get_by_id(get_jwt_identity())
        if not instructor:
            raise InvalidCredential("Instructor not found")
        return success_response(data={"role": ROLE_INSTRUCTOR, "instructor": instructor.to_dict()})

    return success_response(data={
        "role": ROLE_STUDENT,
        "identity": {
            "subjectId": get_jwt_identity(),
            "name": claims.get("name"),
            "email": claims.get("email"),
            "avatarUrl": claims.get("picture")
        }
    })
