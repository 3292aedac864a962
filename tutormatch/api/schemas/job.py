# tutormatch/api/schemas/job.py
from marshmallow import Schema, fields, validate

from tutormatch.core.pricing.fee_tables import MIN_FREQUENCY, MAX_FREQUENCY
from tutormatch.core.workflow.job_status import SexRequirement

class JobCreateSchema(Schema):
    """家长发布需求"""
    title = fields.String(required=True, validate=validate.Length(min=1, max=200), metadata={'description': "标题"})
    grade = fields.String(load_default=None, metadata={'description': "年级，如 初二、高一"})
    subject = fields.String(load_default=None, metadata={'description': "科目"})
    price = fields.String(required=True, metadata={'description': "价格，如 ¥100/小时"})
    frequency = fields.Integer(
        load_default=MIN_FREQUENCY,
        validate=validate.Range(min=MIN_FREQUENCY, max=MAX_FREQUENCY),
        metadata={'description': "每周次数"},
    )
    address = fields.String(load_default=None, metadata={'description': "上课地址"})
    contact_name = fields.String(load_default=None, metadata={'description': "家长称呼"})
    contact_phone = fields.String(required=True, metadata={'description': "家长电话"})
    manage_password = fields.String(load_default=None, metadata={'description': "管理密码，用于家长登录"})
    sex_requirement = fields.String(
        load_default=SexRequirement.UNLIMITED.value,
        validate=validate.OneOf([s.value for s in SexRequirement]),
        metadata={'description': "教员性别要求"},
    )

class FeeQuoteSchema(Schema):
    hours = fields.Float(metadata={'description': "计费课时"})
    amount = fields.Float(metadata={'description': "信息费"})
    note = fields.String(metadata={'description': "说明"})

class JobSchema(Schema):
    """需求信息"""
    id = fields.Integer()
    title = fields.String()
    grade = fields.String(allow_none=True)
    subject = fields.String(allow_none=True)
    price = fields.String()
    frequency = fields.Integer()
    address = fields.String(allow_none=True)
    status = fields.String()
    is_active = fields.Boolean()
    sex_requirement = fields.String(allow_none=True)
    created_at = fields.DateTime()
    fee = fields.Nested(FeeQuoteSchema)
    is_recommended = fields.Boolean()

class FeeQuerySchema(Schema):
    grade = fields.String(load_default='', metadata={'description': "年级"})
    frequency = fields.Integer(load_default=MIN_FREQUENCY, validate=validate.Range(min=MIN_FREQUENCY, max=MAX_FREQUENCY), metadata={'description': "每周次数"})
    price = fields.String(required=True, metadata={'description': "价格文本"})

class JobReviewSchema(Schema):
    """管理员审核需求"""
    action = fields.String(required=True, validate=validate.OneOf(['publish', 'reject']), metadata={'description': "publish 上架 / reject 拒绝"})
