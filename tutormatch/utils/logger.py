import os
import logging
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from flask import request, has_request_context

LOG_FORMAT = (
    '[%(asctime)s] %(levelname)s in %(module)s: '
    'url: %(url)s | method: %(method)s | actor: %(actor)s | '
    'remote_addr: %(remote_addr)s | %(message)s'
)
MAX_BYTES = 10 * 1024 * 1024  # 10MB


class RequestFormatter(logging.Formatter):
    """在日志中带上当前请求和操作人"""

    def format(self, record):
        in_request = has_request_context()
        record.url = request.url if in_request else None
        record.method = request.method if in_request else None
        record.remote_addr = request.remote_addr if in_request else None
        # 由 role_required 写入，匿名请求没有
        record.actor = getattr(request, 'actor', 'anonymous') if in_request else None
        return super().format(record)


def _rotating(path, formatter, level, backup_count):
    handler = RotatingFileHandler(path, maxBytes=MAX_BYTES, backupCount=backup_count, encoding='utf-8')
    handler.setFormatter(formatter)
    handler.setLevel(level)
    return handler


def setup_logger(app, log_level=logging.INFO):
    """
    配置应用日志

    控制台 + app.log（按大小轮转）+ error.log（按天轮转，只记 ERROR）；
    SQLAlchemy 的日志单独写 sql.log。日志目录取 LOG_DIR 配置。
    """
    log_dir = app.config.get('LOG_DIR', 'logs')
    os.makedirs(log_dir, exist_ok=True)
    formatter = RequestFormatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)

    error_handler = TimedRotatingFileHandler(
        os.path.join(log_dir, 'error.log'), when='D', interval=1, backupCount=30, encoding='utf-8'
    )
    error_handler.setFormatter(formatter)
    error_handler.setLevel(logging.ERROR)

    app_logger = logging.getLogger(app.name)
    app_logger.setLevel(log_level)
    # 重复创建应用时避免处理器叠加
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()
    app_logger.addHandler(console_handler)
    app_logger.addHandler(_rotating(os.path.join(log_dir, 'app.log'), formatter, log_level, 10))
    app_logger.addHandler(error_handler)

    sql_logger = logging.getLogger('sqlalchemy.engine')
    if not any(isinstance(h, RotatingFileHandler) for h in sql_logger.handlers):
        sql_logger.addHandler(_rotating(os.path.join(log_dir, 'sql.log'), formatter, logging.WARNING, 5))
    sql_logger.setLevel(logging.WARNING)

    return app_logger
