from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager
from flask_socketio import SocketIO
from flask_cors import CORS
from flask_smorest import Api as ApiSpec

# 初始化扩展，但不绑定到特定应用
db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()
socketio = SocketIO()
cors = CORS()
api_spec = ApiSpec()

def init_extensions(app):
    """初始化所有扩展"""
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    origins = app.config['CORS_ORIGINS']
    if origins == ['*']:
        origins = '*'
    cors.init_app(app, origins=origins)
    socketio.init_app(
        app,
        cors_allowed_origins=origins,
        message_queue=app.config.get('SOCKETIO_MESSAGE_QUEUE'),
    )
    api_spec.init_app(app)
