from datetime import datetime, timezone
from tutormatch.extensions import db


def utcnow():
    return datetime.now(timezone.utc)


class Base(db.Model):
    """模型基类，提供时间戳字段"""
    __abstract__ = True

    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, index=True, comment='创建时间')
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow, comment='更新时间')
