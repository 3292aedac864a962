# tutormatch/api/endpoints/profiles.py
from flask import g
from flask_smorest import Blueprint

from tutormatch.api.schemas import ProfileUpsertSchema, ProfileSchema
from tutormatch.core.auth.service import AuthService
from tutormatch.core.workflow.order_status import Role
from tutormatch.services.student.profile_service import ProfileService
from tutormatch.utils.auth import role_required
from tutormatch.utils.response import APIResponse
from tutormatch.utils.decorators import api_error_handler

profiles_bp = Blueprint(
    'profiles',
    'profiles',
    description='学生简历接口',
)

@profiles_bp.route('', methods=['POST'])
@profiles_bp.arguments(ProfileUpsertSchema)
@profiles_bp.response(200)
@api_error_handler
def upsert_profile(data):
    """
    提交简历

    手机号相同则更新。保存成功后返回学生访问令牌
    """
    data = dict(data)
    phone = data.pop('phone')
    password = data.pop('password', None)
    profile, created = ProfileService.upsert_profile(phone, data, password)

    result = AuthService.generate_token(Role.STUDENT, profile.phone)
    result['profile'] = profile.to_dict()
    return APIResponse.success(
        data=result,
        message="简历已创建" if created else "简历已更新",
        code=201 if created else 200
    )

@profiles_bp.route('/me', methods=['GET'])
@profiles_bp.response(200, ProfileSchema)
@role_required(Role.STUDENT)
@api_error_handler
def my_profile():
    """当前学生的简历"""
    profile = ProfileService.get_profile(g.actor)
    return APIResponse.success(data=profile.to_dict(), message="获取简历成功")
