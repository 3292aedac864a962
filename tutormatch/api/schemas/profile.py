# tutormatch/api/schemas/profile.py
from marshmallow import Schema, fields

class ProfileUpsertSchema(Schema):
    """学生简历提交，phone 相同则更新"""
    phone = fields.String(required=True, metadata={'description': "手机号"})
    password = fields.String(load_default=None, allow_none=True, load_only=True, metadata={'description': "密码，首次设置后修改简历需提供"})
    name = fields.String(required=True, metadata={'description': "姓名"})
    school = fields.String(required=True, metadata={'description': "学校"})
    major = fields.String(allow_none=True, metadata={'description': "专业"})
    grade = fields.String(allow_none=True, metadata={'description': "年级"})
    experience = fields.String(allow_none=True, metadata={'description': "经验介绍"})
    gender = fields.String(allow_none=True, metadata={'description': "性别 male/female"})
    preferred_grades = fields.String(allow_none=True, metadata={'description': "意向年级，逗号分隔"})
    preferred_subjects = fields.String(allow_none=True, metadata={'description': "意向科目，逗号分隔"})

class ProfileSchema(Schema):
    phone = fields.String()
    name = fields.String()
    school = fields.String()
    major = fields.String(allow_none=True)
    grade = fields.String(allow_none=True)
    experience = fields.String(allow_none=True)
    gender = fields.String(allow_none=True)
    preferred_grades = fields.String(allow_none=True)
    preferred_subjects = fields.String(allow_none=True)
    created_at = fields.DateTime()
