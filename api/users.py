from __future__ import annotations

from flask import Blueprint, request, jsonify, g, abort, current_app

from models import storage
from models.schemas.user import RoleAssignSchema, UserOutSchema
from services.user_manager import UserManager
from utils.decorators import jwt_required, roles_required

bp = Blueprint("users", __name__)

role_assign_schema = RoleAssignSchema()
user_out_schema = UserOutSchema()


@bp.get("/me")
@jwt_required()
def me():
    """
    Get current user info.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    return jsonify(
        {
            "data": user_out_schema.dump(g.current_user)
        }
    ), 200


@bp.post("/users/<user_id>/roles")
@roles_required(["Admin"])
def add_roles(user_id: str):
    """
    Admin-only: add roles to a user. Roles already held are skipped.
    Body: { "roles": ["Admin", "User"] }
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      -  in: path
         name: user_id
         type: string
         required: true
      -  in: body
         name: body
         schema:
           type: object
           properties:
             roles: { type: array, items: { type: string } }
    responses:
      200: { description: OK }
      403: { description: Insufficient role }
      404: { description: User not found }
      422: { description: Validation error }
    """
    data = role_assign_schema.load(request.get_json(silent=True) or {})
    roles = data["roles"]

    allowed = set(current_app.config.get("ALLOWED_ROLES", ["Admin", "User"]))
    if any(r not in allowed for r in roles):
        abort(422, description=f"Roles must be subset of {sorted(allowed)}")

    users = UserManager(storage)
    user = users.find_by_id(user_id)
    if not user:
        abort(404)

    with storage.transaction():
        for role in roles:
            if role in users.get_roles(user):
                continue
            result = users.add_to_role(user, role)
            if not result.succeeded:
                abort(400, description=result.first_error)

    return jsonify(
        {
            "data": user_out_schema.dump(user)
        }
    ), 200
