# tutormatch/api/endpoints/auth.py
from flask_smorest import Blueprint

from tutormatch.api.schemas import AdminLoginSchema, ParentLoginSchema, StudentLoginSchema, TokenSchema
from tutormatch.core.auth.service import AuthService
from tutormatch.utils.response import APIResponse
from tutormatch.utils.decorators import api_error_handler

# 创建认证蓝图
auth_bp = Blueprint(
    'auth',
    'auth',
    description='管理员、家长、学生登录接口',
)

@auth_bp.route('/admin', methods=['POST'])
@auth_bp.arguments(AdminLoginSchema)
@auth_bp.response(200, TokenSchema)
@api_error_handler
def admin_login(data):
    """
    管理员登录

    桌面端和移动端各使用一个口令
    """
    result = AuthService.admin_login(data['access_code'], data['surface'])
    return APIResponse.success(data=result, message="登录成功")

@auth_bp.route('/parent', methods=['POST'])
@auth_bp.arguments(ParentLoginSchema)
@auth_bp.response(200, TokenSchema)
@api_error_handler
def parent_login(data):
    """家长凭手机号和管理密码登录"""
    result = AuthService.parent_login(data['phone'], data['password'])
    return APIResponse.success(data=result, message="登录成功")

@auth_bp.route('/student', methods=['POST'])
@auth_bp.arguments(StudentLoginSchema)
@auth_bp.response(200, TokenSchema)
@api_error_handler
def student_login(data):
    """学生凭手机号（及简历密码）登录"""
    result = AuthService.student_login(data['phone'], data.get('password'))
    return APIResponse.success(data=result, message="登录成功")
