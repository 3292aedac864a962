from tutormatch.extensions import db
from tutormatch.models.base import Base
from tutormatch.core.workflow.order_status import INITIAL_STATUS

class Order(Base):
    """学生对家教需求的申请，承载审核流程状态"""
    __tablename__ = 'orders'

    id = db.Column(db.Integer, primary_key=True)
    job_id = db.Column(db.Integer, db.ForeignKey('jobs.id'), nullable=False, index=True, comment='需求ID')
    # 学生没有账号，手机号即身份
    student_contact = db.Column(db.String(20), nullable=False, index=True, comment='学生手机号')
    status = db.Column(db.String(20), nullable=False, default=INITIAL_STATUS.value, index=True, comment='订单状态')

    job = db.relationship('Job', back_populates='orders')

    def to_dict(self):
        return {
            'id': self.id,
            'job_id': self.job_id,
            'student_contact': self.student_contact,
            'status': self.status,
            'created_at': self.created_at,
        }
