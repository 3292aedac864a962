import pytest

from tutormatch import create_app
from tutormatch.core.auth.service import AuthService
from tutormatch.core.workflow.job_status import JobStatus
from tutormatch.core.workflow.order_status import Role
from tutormatch.extensions import db
from tutormatch.services.job.job_service import JobService
from tutormatch.services.student.profile_service import ProfileService
from tutormatch.services.sync.change_feed import change_feed
from tutormatch.services.sync.schema_probe import EXTENSION_KEY, SchemaCapabilities

PARENT_PHONE = '13800000001'
PARENT_PASSWORD = 'parent-pass'
STUDENT_PHONE = '13900000002'
OTHER_STUDENT_PHONE = '13900000003'


@pytest.fixture(scope='session')
def app():
    # api_spec 是全局对象，整个测试会话只创建一次应用
    return create_app('testing')


@pytest.fixture(autouse=True)
def clean_db(app):
    with app.app_context():
        db.drop_all()
        db.create_all()
        app.extensions[EXTENSION_KEY] = SchemaCapabilities(job_status=True)
        change_feed.clear()
        yield
        db.session.remove()
        change_feed.clear()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_job():
    """发布一条需求，默认审核通过上架"""
    def _make(status=JobStatus.PUBLISHED, **overrides):
        data = {
            'title': '初二数学辅导',
            'grade': '初二',
            'subject': '数学',
            'price': '¥100/小时',
            'frequency': 2,
            'address': '海淀区',
            'contact_name': '王女士',
            'contact_phone': PARENT_PHONE,
            'manage_password': PARENT_PASSWORD,
            'sex_requirement': 'unlimited',
        }
        data.update(overrides)
        job = JobService.create_job(data)
        if status != JobStatus.PENDING:
            first = JobStatus.REJECTED if status == JobStatus.REJECTED else JobStatus.PUBLISHED
            JobService.update_job_status(job.id, first, Role.ADMIN)
        return job
    return _make


@pytest.fixture
def make_profile():
    def _make(phone=STUDENT_PHONE, password=None, **overrides):
        data = {
            'name': '李同学',
            'school': '北京大学',
            'major': '数学',
            'grade': '大二',
            'experience': '带过两个初中生',
            'gender': 'female',
            'preferred_grades': '初二,初三',
            'preferred_subjects': '数学',
        }
        data.update(overrides)
        profile, _ = ProfileService.upsert_profile(phone, data, password)
        return profile
    return _make


@pytest.fixture
def auth_headers():
    def _headers(role, identity):
        token = AuthService.generate_token(role, identity)['access_token']
        return {'Authorization': f'Bearer {token}'}
    return _headers


@pytest.fixture
def admin_headers(auth_headers):
    return auth_headers(Role.ADMIN, 'admin:desktop')
