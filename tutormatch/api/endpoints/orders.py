# tutormatch/api/endpoints/orders.py
from flask import g, current_app
from flask_smorest import Blueprint

from tutormatch.api.schemas import ApplicationSchema, OrderSchema
from tutormatch.core.workflow.order_status import Role
from tutormatch.services.order.order_service import OrderService
from tutormatch.utils.auth import role_required
from tutormatch.utils.response import APIResponse
from tutormatch.utils.decorators import api_error_handler

orders_bp = Blueprint(
    'orders',
    'orders',
    description='学生订单接口',
)

@orders_bp.route('/mine', methods=['GET'])
@orders_bp.response(200)
@role_required(Role.STUDENT)
@api_error_handler
def my_orders():
    """
    我的订单

    只有放号后的订单才包含家长联系方式
    """
    orders = OrderService.list_orders_for_student(g.actor)
    return APIResponse.success(
        data={
            'orders': orders,
            'customer_service_qq': current_app.config.get('CUSTOMER_SERVICE_QQ'),
        },
        message="获取订单成功"
    )

@orders_bp.route('', methods=['POST'])
@orders_bp.arguments(ApplicationSchema)
@orders_bp.response(201, OrderSchema)
@role_required(Role.STUDENT)
@api_error_handler
def apply(data):
    """申请接单"""
    order = OrderService.submit_application(data['job_id'], g.actor)
    return APIResponse.success(
        data=order.to_dict(),
        message="申请成功！请等待审核。",
        code=201
    )

@orders_bp.route('/<int:order_id>/payment', methods=['POST'])
@orders_bp.response(200, OrderSchema)
@role_required(Role.STUDENT)
@api_error_handler
def confirm_payment(order_id):
    """学生确认已付款，等待管理员核对后放号"""
    order = OrderService.confirm_student_payment(order_id, g.actor)
    return APIResponse.success(data=order.to_dict(), message="已确认付款，请等待放号。")
