"""
启动时探测数据库表结构

早期部署的 jobs 表没有 status 列，只有 is_active。启动时探测一次，
之后所有查询按探测结果选择读写路径，不在每个查询处各自捕获异常。
"""
from dataclasses import dataclass

from flask import current_app
from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from tutormatch.core.errors import StoreUnavailable

EXTENSION_KEY = 'tutormatch.schema'


@dataclass
class SchemaCapabilities:
    job_status: bool = True


def probe_schema(engine):
    """检查 jobs 表实际存在的列；表还不存在时按当前模型处理"""
    try:
        inspector = inspect(engine)
        tables = set(inspector.get_table_names())
        caps = SchemaCapabilities()
        if 'jobs' in tables:
            job_columns = {c['name'] for c in inspector.get_columns('jobs')}
            caps.job_status = 'status' in job_columns
    except SQLAlchemyError as e:
        raise StoreUnavailable(f"数据库连接失败: {e}")
    return caps


def init_schema_capabilities(app, engine):
    try:
        caps = probe_schema(engine)
    except StoreUnavailable as e:
        app.logger.error(e.message)
        caps = SchemaCapabilities()
    if not caps.job_status:
        app.logger.warning("jobs 表缺少 status 列，使用 is_active 兼容模式")
    app.extensions[EXTENSION_KEY] = caps
    return caps


def get_capabilities():
    caps = current_app.extensions.get(EXTENSION_KEY)
    if caps is None:
        caps = SchemaCapabilities()
        current_app.extensions[EXTENSION_KEY] = caps
    return caps
