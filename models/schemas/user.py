from marshmallow import Schema, fields, pre_load


def _norm_username(v):
    return v.strip() if isinstance(v, str) else v


class SignUpSchema(Schema):
    username = fields.String(required=True, validate=lambda s: 0 < len(s) <= 150)
    password = fields.String(required=True, load_only=True)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "username" in data:
            data["username"] = _norm_username(data["username"])
        return data


class SignInSchema(Schema):
    # no length rules here: a failed sign-in must look the same whatever was wrong
    username = fields.String(required=True)
    password = fields.String(required=True, load_only=True)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "username" in data:
            data["username"] = _norm_username(data["username"])
        return data


class RoleAssignSchema(Schema):
    roles = fields.List(fields.String(), required=True, validate=lambda r: len(r) > 0)


class UserOutSchema(Schema):
    id = fields.String(allow_none=False)
    username = fields.String()
    roles = fields.Method("get_roles")
    created_at = fields.DateTime()

    def get_roles(self, obj):
        return obj.role_names
