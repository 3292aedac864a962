# tutormatch/config.py
import os
from datetime import timedelta
from dotenv import load_dotenv

ENV_FILES = {
    'production': '.env.production',
    'testing': '.env.testing',
    'development': '.env.development',
}


def load_env_file(env_name):
    """先加载环境专属的 .env 文件，再用 .env 补齐缺省项"""
    env_file = ENV_FILES.get(env_name, ENV_FILES['development'])
    if os.path.exists(env_file):
        load_dotenv(env_file)
    load_dotenv('.env')


load_env_file(os.environ.get('FLASK_ENV', 'development'))


def _env_int(name, default):
    return int(os.environ.get(name, default))


class Config:
    """应用配置"""
    DEBUG = os.environ.get('FLASK_DEBUG', '0') == '1'
    TESTING = False
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'hard-to-guess-string'

    # 数据库配置
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///tutormatch.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # JWT：家长与学生的令牌有效期（天），管理员另见 ADMIN_SESSION_HOURS
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY') or 'jwt-secret-string'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=_env_int('JWT_ACCESS_TOKEN_EXPIRES_DAYS', 15))

    # 管理员口令：桌面端与移动端各一个
    ADMIN_ACCESS_CODE = os.environ.get('ADMIN_ACCESS_CODE', '')
    ADMIN_MOBILE_ACCESS_CODE = os.environ.get('ADMIN_MOBILE_ACCESS_CODE', '')
    # 管理员会话有效期（小时）
    ADMIN_SESSION_HOURS = _env_int('ADMIN_SESSION_HOURS', 12)

    # 客服QQ，付款页展示
    CUSTOMER_SERVICE_QQ = os.environ.get('CUSTOMER_SERVICE_QQ', '')

    # 多进程部署时 Socket.IO 的消息队列，如 redis://localhost:6379/0
    SOCKETIO_MESSAGE_QUEUE = os.environ.get('SOCKETIO_MESSAGE_QUEUE')

    # 日志配置
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_DIR = os.environ.get('LOG_DIR', 'logs')

    # CORS配置
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*').split(',')

    # API文档配置
    API_TITLE = os.environ.get('API_TITLE', 'Tutor Match API')
    API_VERSION = os.environ.get('API_VERSION', 'v1')
    OPENAPI_VERSION = "3.0.2"
    OPENAPI_URL_PREFIX = "/docs"
    OPENAPI_SWAGGER_UI_PATH = "/swagger"
    OPENAPI_SWAGGER_UI_URL = "https://cdn.jsdelivr.net/npm/swagger-ui-dist/"

    @staticmethod
    def init_app(app):
        pass


class DevelopmentConfig(Config):
    DEBUG = True


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    JWT_SECRET_KEY = 'testing-jwt-secret-key-of-enough-length'
    ADMIN_ACCESS_CODE = 'desk-secret'
    ADMIN_MOBILE_ACCESS_CODE = 'mobile-secret'
    LOG_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), 'logs', 'testing')


class ProductionConfig(Config):
    DEBUG = False

    @staticmethod
    def init_app(app):
        if not app.config['ADMIN_ACCESS_CODE'] and not app.config['ADMIN_MOBILE_ACCESS_CODE']:
            app.logger.warning("未配置管理员口令，管理端将无法登录")


config_by_name = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig,
}
