# tutormatch/services/student/profile_service.py
import hmac

from flask import current_app

from tutormatch.core.errors import BusinessRuleError, NotFound, PermissionDenied
from tutormatch.core.workflow.job_status import SexRequirement
from tutormatch.extensions import db
from tutormatch.models.student_profile import StudentProfile
from tutormatch.services.sync.change_feed import change_feed, EVENT_INSERT, EVENT_UPDATE
from tutormatch.services.sync.store import commit
from tutormatch.utils.validators import validate_phone

PROFILE_FIELDS = (
    'name', 'school', 'major', 'grade', 'experience', 'gender',
    'preferred_grades', 'preferred_subjects',
)
REQUIRED_FIELDS = ('name', 'school')
GENDERS = (SexRequirement.MALE.value, SexRequirement.FEMALE.value)


def _password_matches(stored, given):
    return hmac.compare_digest((stored or '').encode('utf-8'), (given or '').encode('utf-8'))


class ProfileService:
    """学生简历服务"""

    @staticmethod
    def get_profile(phone):
        profile = db.session.get(StudentProfile, phone)
        if not profile:
            raise NotFound("简历不存在，请先完善简历")
        return profile

    @staticmethod
    def upsert_profile(phone, data, password=None):
        """
        按手机号创建或更新简历

        已设置密码的简历，只有提供正确密码才能修改。
        :return: (profile, created)
        """
        if not validate_phone(phone):
            raise BusinessRuleError("手机号必须是 11 位数字")

        missing = [f for f in REQUIRED_FIELDS if not (data.get(f) or '').strip()]
        if missing:
            raise BusinessRuleError("请填写必填项", details={'missing': missing})

        gender = data.get('gender')
        if gender and gender not in GENDERS:
            raise BusinessRuleError("性别只能是 male 或 female")

        profile = db.session.get(StudentProfile, phone)
        created = profile is None
        if created:
            profile = StudentProfile(phone=phone)
            db.session.add(profile)
        elif profile.password and not _password_matches(profile.password, password):
            current_app.logger.warning(f"简历更新被拒绝，密码错误: {phone}")
            raise PermissionDenied("密码错误")

        for key in PROFILE_FIELDS:
            if key in data and data[key] is not None:
                setattr(profile, key, data[key])
        if password and not profile.password:
            profile.password = password

        commit("保存简历")
        current_app.logger.info(f"简历{'创建' if created else '更新'}成功: {phone}")
        change_feed.publish('profiles', EVENT_INSERT if created else EVENT_UPDATE, {'phone': phone})
        return profile, created

    @staticmethod
    def authenticate(phone, password=None):
        """
        学生回访登录

        简历未设置密码时仅凭手机号即可登录。
        """
        profile = db.session.get(StudentProfile, phone)
        if not profile:
            raise NotFound("未找到简历，请先申请或注册")
        if profile.password and not _password_matches(profile.password, password):
            current_app.logger.warning(f"学生登录失败，密码错误: {phone}")
            raise PermissionDenied("手机号或密码错误")
        return profile
