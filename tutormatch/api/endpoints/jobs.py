# tutormatch/api/endpoints/jobs.py
from flask import g
from flask_smorest import Blueprint

from tutormatch.api.schemas import JobCreateSchema, JobSchema, FeeQuerySchema, FeeQuoteSchema
from tutormatch.core.pricing.fee_calculator import compute_fee, fee_for_job
from tutormatch.core.recommendation.matcher import is_recommended
from tutormatch.core.workflow.order_status import Role
from tutormatch.extensions import db
from tutormatch.models.student_profile import StudentProfile
from tutormatch.services.job.job_service import JobService
from tutormatch.utils.auth import role_required
from tutormatch.utils.response import APIResponse
from tutormatch.utils.decorators import api_error_handler

jobs_bp = Blueprint(
    'jobs',
    'jobs',
    description='家教需求市场与发布接口',
)

@jobs_bp.route('', methods=['GET'])
@jobs_bp.response(200, JobSchema(many=True))
@role_required(Role.STUDENT, Role.PARENT, Role.ADMIN, optional=True)
@api_error_handler
def list_jobs():
    """
    需求市场

    已上架的需求，按发布时间倒序，附带信息费。
    学生登录后不再显示自己申请过的需求，并标记与简历意向匹配的需求。
    """
    phone = g.actor if g.role == Role.STUDENT.value else None
    profile = db.session.get(StudentProfile, phone) if phone else None

    jobs = []
    for job in JobService.list_published_jobs(exclude_phone=phone):
        item = JobService.serialize(job)
        item['fee'] = fee_for_job(job).to_dict()
        item['is_recommended'] = is_recommended(job, profile)
        jobs.append(item)
    return APIResponse.success(data=jobs, message="获取需求列表成功")

@jobs_bp.route('', methods=['POST'])
@jobs_bp.arguments(JobCreateSchema)
@jobs_bp.response(201, JobSchema)
@api_error_handler
def create_job(data):
    """家长发布需求，审核通过后上架"""
    job = JobService.create_job(data)
    return APIResponse.success(
        data=JobService.serialize(job, include_contact=True),
        message="发布成功！请等待管理员审核。",
        code=201
    )

@jobs_bp.route('/fee', methods=['GET'])
@jobs_bp.arguments(FeeQuerySchema, location='query')
@jobs_bp.response(200, FeeQuoteSchema)
@api_error_handler
def quote_fee(args):
    """按年级、每周次数和价格估算信息费"""
    quote = compute_fee(args['grade'], args['frequency'], args['price'])
    return APIResponse.success(data=quote.to_dict(), message="计算成功")

@jobs_bp.route('/<int:job_id>', methods=['DELETE'])
@jobs_bp.response(200)
@role_required(Role.PARENT, Role.ADMIN)
@api_error_handler
def delete_job(job_id):
    """删除需求及其下所有订单，家长只能删除自己的需求"""
    deleted_orders = JobService.delete_job(job_id, g.role, g.actor)
    return APIResponse.success(
        data={'job_id': job_id, 'deleted_orders': deleted_orders},
        message="删除成功"
    )
