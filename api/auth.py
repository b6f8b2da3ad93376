"""
Authentication blueprint:
- POST /auth/sign-up
- POST /auth/sign-in
- POST /auth/refresh
- POST /auth/sign-out

The implementation:
- Delegates every operation to services.auth_service.AuthService
- Tokens travel in HTTP-only cookies written through RequestSessionContext
- Orchestrator results are returned as {"message", "status"} with the result's status code
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, current_app

from api.session_context import RequestSessionContext
from models import storage
from models.schemas.user import SignUpSchema, SignInSchema
from services.auth_service import AuthService
from services.results import ServiceResult
from utils.security import JwtSettings

bp = Blueprint("auth", __name__, url_prefix="/auth")

sign_up_schema = SignUpSchema()
sign_in_schema = SignInSchema()


def build_session_context() -> RequestSessionContext:
    return RequestSessionContext(
        request,
        JwtSettings.from_mapping(current_app.config),
        access_cookie=current_app.config["ACCESS_COOKIE_NAME"],
        refresh_cookie=current_app.config["REFRESH_COOKIE_NAME"],
        secure=current_app.config.get("COOKIE_SECURE", False),
    )


def build_auth_service(context: RequestSessionContext) -> AuthService:
    return AuthService(context.settings, context, storage=storage)


def to_response(result: ServiceResult, context: RequestSessionContext):
    response = jsonify({"message": result.message, "status": result.status})
    response.status_code = result.status
    return context.apply(response)


@bp.post("/sign-up")
def sign_up():
    """
    Register a new user with the default role.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            username: { type: string }
            password: { type: string }
    responses:
      201:
        description: Created
      400:
        description: User could not be created
      422:
        description: Validation error
    """
    data = sign_up_schema.load(request.get_json(silent=True) or {})
    context = build_session_context()
    result = build_auth_service(context).sign_up(data["username"], data["password"])
    return to_response(result, context)


@bp.post("/sign-in")
def sign_in():
    """
    Sign in: sets access_token and refresh_token cookies
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             username: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (token cookies set)
      401:
        description: Wrong login or password
    """
    data = sign_in_schema.load(request.get_json(silent=True) or {})
    context = build_session_context()
    result = build_auth_service(context).sign_in(data["username"], data["password"])
    return to_response(result, context)


@bp.post("/refresh")
def refresh():
    """
    Renew the access token from the refresh token cookie (rotates it near expiry)
    ---
    tags:
      - Auth
    responses:
      200:
        description: OK (access_token cookie renewed)
      401:
        description: Invalid or expired refresh token
    """
    context = build_session_context()
    result = build_auth_service(context).refresh_token()
    return to_response(result, context)


@bp.post("/sign-out")
def sign_out():
    """
    Sign out: revokes the refresh token and clears both cookies
    ---
    tags:
      - Auth
    responses:
      200:
        description: OK
      401:
        description: Invalid or expired refresh token
    """
    context = build_session_context()
    result = build_auth_service(context).sign_out()
    return to_response(result, context)
