from marshmallow import Schema, fields

from tutormatch.api.schemas.auth import (
    AdminLoginSchema, ParentLoginSchema, StudentLoginSchema, TokenSchema,
)
from tutormatch.api.schemas.job import (
    JobCreateSchema, JobSchema, FeeQuerySchema, FeeQuoteSchema, JobReviewSchema,
)
from tutormatch.api.schemas.order import (
    ApplicationSchema, OrderSchema, CandidateDecisionSchema,
    AdminOrderQuerySchema, OrderStatusUpdateSchema,
)
from tutormatch.api.schemas.profile import ProfileSchema, ProfileUpsertSchema

class HealthSchema(Schema):
    """健康检查响应模式"""
    status = fields.String(required=True, metadata={'description': "系统状态"})
    version = fields.String(required=True, metadata={'description': "API版本"})
    timestamp = fields.DateTime(required=True, metadata={'description': "当前服务器时间"})
    environment = fields.String(required=True, metadata={'description': "运行环境"})
    database = fields.String(metadata={'description': "数据库连接状态"})
    job_status_column = fields.Boolean(metadata={'description': "jobs 表是否有 status 列"})
