# tutormatch/api/endpoints/parent.py
from flask import g
from flask_smorest import Blueprint

from tutormatch.api.schemas import CandidateDecisionSchema
from tutormatch.core.workflow.order_status import OrderStatus, Role
from tutormatch.services.order.order_service import OrderService
from tutormatch.utils.auth import role_required
from tutormatch.utils.response import APIResponse
from tutormatch.utils.decorators import api_error_handler

parent_bp = Blueprint(
    'parent',
    'parent',
    description='家长管理需求与申请人接口',
)

@parent_bp.route('/jobs', methods=['GET'])
@parent_bp.response(200)
@role_required(Role.PARENT)
@api_error_handler
def my_jobs():
    """自己发布的需求及申请人简历"""
    jobs = OrderService.list_jobs_with_candidates(g.actor)
    return APIResponse.success(data=jobs, message="获取需求成功")

@parent_bp.route('/orders/<int:order_id>', methods=['PATCH'])
@parent_bp.arguments(CandidateDecisionSchema)
@parent_bp.response(200)
@role_required(Role.PARENT)
@api_error_handler
def decide(data, order_id):
    """同意或拒绝申请人"""
    approve = data['decision'] == 'approve'
    target = OrderStatus.PARENT_APPROVED if approve else OrderStatus.REJECTED
    order = OrderService.update_order_status(order_id, target, Role.PARENT, g.actor)
    return APIResponse.success(data=order.to_dict(), message="已同意" if approve else "已拒绝")
