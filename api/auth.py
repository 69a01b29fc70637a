"""
Authentication blueprint:
- POST /auth/signup
- POST /auth/login
- POST /auth/refresh-token
- POST /auth/logout

Responses carry camelCase keys: {"accessToken": ..., "refreshToken": ...}
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, g

from models.schemas.user import (
    RegisterRequestSchema,
    AuthenticationRequestSchema,
    AuthenticationResponseSchema,
)
from services import auth_service
from utils.decorators import jwt_required

bp = Blueprint("auth", __name__)

register_schema = RegisterRequestSchema()
login_schema = AuthenticationRequestSchema()
auth_response_schema = AuthenticationResponseSchema()


@bp.post("/signup")
def signup():
    """
    Register a new user and return a fresh token pair.
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
            firstname: { type: string }
            lastname: { type: string }
            email: { type: string }
            password: { type: string }
            role: { type: string, enum: [USER, ADMIN, MANAGER] }
    responses:
      200:
        description: OK (returns accessToken and refreshToken)
      409:
        description: Email already registered
      422:
        description: Validation error
    """
    payload = request.get_json(silent=True) or {}
    data = register_schema.load(payload)
    tokens = auth_service.register(
        firstname=data.get("firstname"),
        lastname=data.get("lastname"),
        email=data["email"],
        password=data["password"],
        role=data.get("role"),
    )
    return jsonify(auth_response_schema.dump(tokens)), 200


@bp.post("/login")
def login():
    """
    Login: return accessToken and refreshToken
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
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      401:
        description: Unauthorized
    """
    payload = request.get_json(silent=True) or {}
    data = login_schema.load(payload)
    tokens = auth_service.authenticate(data["email"], data["password"])
    return jsonify(auth_response_schema.dump(tokens)), 200


@bp.post("/refresh-token")
def refresh_token():
    """
    Use the refresh token in the Authorization header to obtain a new access token.
    An empty 200 response is returned when the header is missing or malformed, or when the
    token is expired or its subject does not match the user it resolves to.
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: OK (returns tokens, or an empty body)
      401:
        description: Malformed token
      404:
        description: Unknown user
    """
    tokens = auth_service.refresh_token(request.headers.get("Authorization"))
    if tokens is None:
        return ("", 200)
    return jsonify(auth_response_schema.dump(tokens)), 200


@bp.post("/logout")
@jwt_required()
def logout():
    """
    logout: revokes the presented access token
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      204:
        description: ""
      401:
        description: Unauthorized
    """
    auth_service.logout(g.current_token)
    return ("", 204)
