from tutormatch.extensions import api_spec
from tutormatch.api.endpoints.health import health_bp
from tutormatch.api.endpoints.auth import auth_bp
from tutormatch.api.endpoints.jobs import jobs_bp
from tutormatch.api.endpoints.profiles import profiles_bp
from tutormatch.api.endpoints.orders import orders_bp
from tutormatch.api.endpoints.parent import parent_bp  # 家长端
from tutormatch.api.endpoints.admin import admin_bp  # 管理端

API_PREFIX = '/api'

BLUEPRINTS = (
    (health_bp, '/health'),
    (auth_bp, '/auth'),
    (jobs_bp, '/jobs'),
    (profiles_bp, '/profiles'),
    (orders_bp, '/orders'),
    (parent_bp, '/parent'),
    (admin_bp, '/admin'),
)

def register_blueprints(app):
    """
    注册蓝图到API文档（同时注册到应用）

    :param app: Flask应用实例
    """
    for blueprint, url_prefix in BLUEPRINTS:
        api_spec.register_blueprint(blueprint, url_prefix=API_PREFIX + url_prefix)
