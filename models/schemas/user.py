from marshmallow import Schema, fields, pre_load, validates, ValidationError

from models.user import Role


def _norm_email(v):
    return v.strip().lower() if isinstance(v, str) else v


class _EmailNormalizingSchema(Schema):
    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data = dict(data)
            data["email"] = _norm_email(data["email"])
        return data


class RegisterRequestSchema(_EmailNormalizingSchema):
    firstname = fields.String(allow_none=True)
    lastname = fields.String(allow_none=True)
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True)
    role = fields.Enum(Role, load_default=Role.USER)

    @validates("password")
    def validate_password(self, value, **kwargs):
        if len(value) < 8:
            raise ValidationError("Password must be at least 8 characters long.")


class AuthenticationRequestSchema(_EmailNormalizingSchema):
    email = fields.String(required=True)
    password = fields.String(required=True, load_only=True)


class AuthenticationResponseSchema(Schema):
    access_token = fields.String(data_key="accessToken")
    refresh_token = fields.String(data_key="refreshToken")


class UserOutSchema(Schema):
    id = fields.String(allow_none=False)
    firstname = fields.String(allow_none=True)
    lastname = fields.String(allow_none=True)
    email = fields.String(allow_none=False)
    role = fields.Enum(Role)
