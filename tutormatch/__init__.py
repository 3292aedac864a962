import os
import logging
from flask import Flask, request
from tutormatch.config import config_by_name
from tutormatch.extensions import db, jwt, init_extensions
from tutormatch.utils.logger import setup_logger
from tutormatch.utils.response import APIResponse

def create_app(config_name=None):
    """
    创建Flask应用实例

    :param config_name: development / testing / production，缺省取 FLASK_CONFIG
    """
    config_name = config_name or os.getenv('FLASK_CONFIG', 'development')
    config_class = config_by_name.get(config_name, config_by_name['default'])

    app = Flask(__name__)
    app.config.from_object(config_class)

    level = getattr(logging, str(app.config['LOG_LEVEL']).upper(), logging.INFO)
    app.logger = setup_logger(app, log_level=level)
    config_class.init_app(app)

    init_extensions(app)
    register_jwt_handlers()

    from tutormatch.api import register_blueprints
    register_blueprints(app)
    register_error_handlers(app)

    # 注册 Socket.IO 事件
    from tutormatch.sockets import events  # noqa: F401

    # 旧库没有 jobs.status，启动时探测一次
    from tutormatch.services.sync.schema_probe import init_schema_capabilities
    with app.app_context():
        init_schema_capabilities(app, db.engine)

    app.logger.info(f"应用已创建，配置: {config_name}")
    return app


def register_jwt_handlers():
    """令牌问题统一返回 401 信封"""
    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return APIResponse.error("认证已过期，请重新登录", code=401)

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return APIResponse.error("无效的认证令牌", errors=reason, code=401)

    @jwt.unauthorized_loader
    def missing_token(reason):
        return APIResponse.error("缺少认证令牌", code=401)


def register_error_handlers(app):
    @app.errorhandler(404)
    def not_found(e):
        app.logger.warning(f"未找到路由: {request.method} {request.path}")
        return APIResponse.error("接口不存在", code=404)

    @app.errorhandler(405)
    def method_not_allowed(e):
        return APIResponse.error("请求方法不被允许", code=405)

    @app.errorhandler(500)
    def server_error(e):
        app.logger.error(f"服务器内部错误: {e}", exc_info=True)
        return APIResponse.error("服务器内部错误", code=500)
