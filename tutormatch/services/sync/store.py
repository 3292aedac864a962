from flask import current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from tutormatch.core.errors import StoreWriteError, StoreUnavailable
from tutormatch.extensions import db


def commit(action):
    """
    提交当前事务，失败时回滚并抛出 StoreWriteError

    :param action: 操作描述，用于日志和错误消息
    """
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raw = getattr(e, 'orig', None) or e
        current_app.logger.error(f"{action}失败: {raw}")
        raise StoreWriteError(f"{action}失败: {raw}")


def check_connection():
    """数据库连通性检查"""
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"数据库连接测试失败：{str(e)}")
        raise StoreUnavailable("连接数据库失败，请检查数据库配置")
