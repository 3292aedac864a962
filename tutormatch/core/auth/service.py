import hmac
from datetime import timedelta

from flask import current_app
from flask_jwt_extended import create_access_token

from tutormatch.core.errors import PermissionDenied
from tutormatch.core.workflow.order_status import Role
from tutormatch.services.job.job_service import JobService
from tutormatch.services.student.profile_service import ProfileService

# 管理端入口：桌面端和移动端各有一个口令
ADMIN_SURFACES = {
    'desktop': 'ADMIN_ACCESS_CODE',
    'mobile': 'ADMIN_MOBILE_ACCESS_CODE',
}


class AuthService:
    """
    三种角色的轻量身份核验

    这里没有真正的账号体系：管理员凭共享口令，家长凭发布需求时的手机号和管理密码，
    学生凭手机号（及可选的简历密码）。核验通过后签发带角色的访问令牌。
    """

    @staticmethod
    def generate_token(role, identity, expires_delta=None):
        role = Role(role)
        token = create_access_token(
            identity=str(identity),
            additional_claims={'role': role.value},
            expires_delta=expires_delta or current_app.config['JWT_ACCESS_TOKEN_EXPIRES'],
        )
        return {'access_token': token, 'role': role.value, 'identity': str(identity)}

    @staticmethod
    def admin_login(access_code, surface='desktop'):
        """口令比对使用恒定时间比较"""
        config_key = ADMIN_SURFACES.get(surface)
        if config_key is None:
            raise PermissionDenied("未知的管理端入口")
        expected = current_app.config.get(config_key) or ''
        if not expected or not hmac.compare_digest(expected.encode('utf-8'), (access_code or '').encode('utf-8')):
            current_app.logger.warning(f"管理员口令错误: 入口 {surface}")
            raise PermissionDenied("密码错误")

        current_app.logger.info(f"管理员登录: 入口 {surface}")
        hours = current_app.config.get('ADMIN_SESSION_HOURS', 12)
        return AuthService.generate_token(Role.ADMIN, f"admin:{surface}", timedelta(hours=hours))

    @staticmethod
    def parent_login(phone, password):
        jobs = JobService.list_jobs_for_parent(phone, password)
        current_app.logger.info(f"家长登录: {phone}，需求 {len(jobs)} 条")
        return AuthService.generate_token(Role.PARENT, phone)

    @staticmethod
    def student_login(phone, password=None):
        profile = ProfileService.authenticate(phone, password)
        tokens = AuthService.generate_token(Role.STUDENT, phone)
        tokens['profile'] = profile.to_dict()
        return tokens
