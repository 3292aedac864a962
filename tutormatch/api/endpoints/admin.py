# tutormatch/api/endpoints/admin.py
from flask_smorest import Blueprint

from tutormatch.api.schemas import AdminOrderQuerySchema, OrderStatusUpdateSchema, JobReviewSchema
from tutormatch.core.workflow.job_status import JobStatus
from tutormatch.core.workflow.order_status import OrderStatus, Role
from tutormatch.services.job.job_service import JobService
from tutormatch.services.order.order_service import OrderService
from tutormatch.utils.auth import role_required
from tutormatch.utils.response import APIResponse
from tutormatch.utils.decorators import api_error_handler
from tutormatch.utils.validators import split_tokens

admin_bp = Blueprint(
    'admin',
    'admin',
    description='管理员审核、财务与需求管理接口',
)

@admin_bp.route('/orders', methods=['GET'])
@admin_bp.arguments(AdminOrderQuerySchema, location='query')
@admin_bp.response(200)
@role_required(Role.ADMIN)
@api_error_handler
def list_orders(args):
    """
    订单列表

    附带需求（含家长联系方式）和学生简历，可按状态过滤，
    如 ?status=payment_pending,final_approved
    """
    statuses = [OrderStatus.parse(s) for s in split_tokens(args.get('status'))]
    orders = OrderService.list_orders_for_admin(statuses or None)
    return APIResponse.success(data=orders, message="获取订单成功")

@admin_bp.route('/applications', methods=['GET'])
@admin_bp.response(200)
@role_required(Role.ADMIN)
@api_error_handler
def list_applications():
    """申请中的订单，按需求分组"""
    groups = OrderService.list_applications_for_admin()
    return APIResponse.success(data=groups, message="获取申请成功")

@admin_bp.route('/finance', methods=['GET'])
@admin_bp.response(200)
@role_required(Role.ADMIN)
@api_error_handler
def list_finance():
    """待确认收款和已完成的订单"""
    orders = OrderService.list_finance_for_admin()
    return APIResponse.success(data=orders, message="获取财务记录成功")

@admin_bp.route('/orders/<int:order_id>', methods=['PATCH'])
@admin_bp.arguments(OrderStatusUpdateSchema)
@admin_bp.response(200)
@role_required(Role.ADMIN)
@api_error_handler
def update_order(data, order_id):
    """按流转表变更订单状态"""
    order = OrderService.update_order_status(order_id, data['status'], Role.ADMIN)
    return APIResponse.success(data=order.to_dict(), message="状态已更新")

@admin_bp.route('/orders/<int:order_id>/confirm-payment', methods=['POST'])
@admin_bp.response(200)
@role_required(Role.ADMIN)
@api_error_handler
def confirm_payment(order_id):
    """确认收款：放号并下架需求"""
    order = OrderService.confirm_payment(order_id)
    return APIResponse.success(
        data=order.to_dict(),
        message="收款成功！该职位已标记为'已接单'并自动下架。"
    )

@admin_bp.route('/jobs/pending', methods=['GET'])
@admin_bp.response(200)
@role_required(Role.ADMIN)
@api_error_handler
def pending_jobs():
    """待审核的需求，先提交的在前"""
    jobs = [JobService.serialize(j, include_contact=True) for j in JobService.list_pending_jobs()]
    return APIResponse.success(data=jobs, message="获取待审核需求成功")

@admin_bp.route('/jobs/<int:job_id>', methods=['PATCH'])
@admin_bp.arguments(JobReviewSchema)
@admin_bp.response(200)
@role_required(Role.ADMIN)
@api_error_handler
def review_job(data, job_id):
    """审核需求：上架或拒绝"""
    target = JobStatus.PUBLISHED if data['action'] == 'publish' else JobStatus.REJECTED
    job = JobService.update_job_status(job_id, target, Role.ADMIN)
    return APIResponse.success(
        data=JobService.serialize(job, include_contact=True),
        message="已上架" if target == JobStatus.PUBLISHED else "已拒绝"
    )

@admin_bp.route('/jobs/<int:job_id>/relist', methods=['POST'])
@admin_bp.response(200)
@role_required(Role.ADMIN)
@api_error_handler
def relist_job(job_id):
    """已接单的需求重新上架"""
    job = JobService.relist_job(job_id)
    return APIResponse.success(data=JobService.serialize(job, include_contact=True), message="已重新上架！")
