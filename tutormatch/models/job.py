from sqlalchemy.orm import deferred

from tutormatch.extensions import db
from tutormatch.models.base import Base
from tutormatch.core.workflow.job_status import JobStatus, status_from_legacy

class Job(Base):
    """家长发布的家教需求"""
    __tablename__ = 'jobs'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False, comment='标题')
    grade = db.Column(db.String(50), comment='年级')
    subject = db.Column(db.String(50), comment='科目')
    price = db.Column(db.String(50), nullable=False, comment='价格，展示用文本，如 ¥100/小时')
    frequency = db.Column(db.Integer, default=1, comment='每周次数 1-7')
    address = db.Column(db.String(200), comment='上课地址')
    contact_name = db.Column(db.String(50), comment='家长称呼')
    contact_phone = db.Column(db.String(20), nullable=False, index=True, comment='家长电话')
    manage_password = db.Column(db.String(64), comment='家长管理密码（明文）')
    is_active = db.Column(db.Boolean, default=False, comment='旧字段，与 status=published 保持一致')
    # 旧表没有该列，默认不随其他列加载，由 JobService._query 按需取出
    status = deferred(db.Column(db.String(20), default=JobStatus.PENDING.value, index=True, comment='pending/published/rejected/taken'))
    sex_requirement = db.Column(db.String(20), comment='教员性别要求 male/female/unlimited')

    orders = db.relationship('Order', back_populates='job', lazy='dynamic')

    def to_dict(self, include_contact=False, has_status_column=True):
        """转换为字典表示

        Args:
            include_contact: 是否包含家长联系方式
            has_status_column: 旧表没有 status 列时由 is_active 推断状态
        """
        if has_status_column:
            status = self.status
        else:
            status = status_from_legacy(self.is_active).value
        result = {
            'id': self.id,
            'title': self.title,
            'grade': self.grade,
            'subject': self.subject,
            'price': self.price,
            'frequency': self.frequency or 1,
            'address': self.address,
            'is_active': bool(self.is_active),
            'status': status,
            'sex_requirement': self.sex_requirement,
            'created_at': self.created_at,
        }
        if include_contact:
            result['contact_name'] = self.contact_name
            result['contact_phone'] = self.contact_phone
        return result
