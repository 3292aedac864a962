# tutormatch/api/schemas/order.py
from marshmallow import Schema, fields, validate, ValidationError, validates

from tutormatch.core.errors import InvalidTransition
from tutormatch.core.workflow.order_status import OrderStatus

class ApplicationSchema(Schema):
    """学生申请接单"""
    job_id = fields.Integer(required=True, metadata={'description': "需求ID"})

class OrderSchema(Schema):
    id = fields.Integer()
    job_id = fields.Integer()
    student_contact = fields.String()
    status = fields.String()
    created_at = fields.DateTime()

class CandidateDecisionSchema(Schema):
    """家长处理申请"""
    decision = fields.String(required=True, validate=validate.OneOf(['approve', 'reject']), metadata={'description': "approve 同意 / reject 拒绝"})

class OrderStatusUpdateSchema(Schema):
    """管理员变更订单状态"""
    status = fields.String(required=True, metadata={'description': "目标状态"})

    @validates('status')
    def validate_status(self, value, **kwargs):
        try:
            OrderStatus.parse(value)
        except InvalidTransition:
            raise ValidationError(f"未知的订单状态: {value}")

class AdminOrderQuerySchema(Schema):
    status = fields.String(load_default=None, metadata={'description': "逗号分隔的状态列表，默认申请中/待付款/待放号"})
