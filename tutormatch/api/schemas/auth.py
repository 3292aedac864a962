# tutormatch/api/schemas/auth.py
from marshmallow import Schema, fields, validate

from tutormatch.core.auth.service import ADMIN_SURFACES

PHONE_PATTERN = r'^\d{11}$'

# 管理员登录
class AdminLoginSchema(Schema):
    access_code = fields.String(required=True, metadata={'description': "管理员口令"})
    surface = fields.String(
        load_default='desktop',
        validate=validate.OneOf(list(ADMIN_SURFACES)),
        metadata={'description': "入口：desktop 或 mobile"},
    )

# 家长登录：发布需求时填写的手机号和管理密码
class ParentLoginSchema(Schema):
    phone = fields.String(required=True, validate=validate.Regexp(PHONE_PATTERN), metadata={'description': "手机号码"})
    password = fields.String(required=True, metadata={'description': "管理密码"})

# 学生登录
class StudentLoginSchema(Schema):
    phone = fields.String(required=True, validate=validate.Regexp(PHONE_PATTERN), metadata={'description': "手机号码"})
    password = fields.String(load_default=None, allow_none=True, metadata={'description': "简历密码，未设置可不填"})

class TokenSchema(Schema):
    """认证响应"""
    access_token = fields.String(metadata={'description': "访问令牌"})
    role = fields.String(metadata={'description': "角色"})
    identity = fields.String(metadata={'description': "身份"})
