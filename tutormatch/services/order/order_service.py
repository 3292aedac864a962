# tutormatch/services/order/order_service.py
import threading
from collections import OrderedDict

from flask import current_app
from sqlalchemy.orm import joinedload, undefer

from tutormatch.core.errors import BusinessRuleError, NotFound, PermissionDenied
from tutormatch.core.pricing.fee_calculator import fee_for_job
from tutormatch.core.recommendation.matcher import is_recommended
from tutormatch.core.workflow.job_status import JobStatus, sex_requirement_met
from tutormatch.core.workflow.order_status import (
    OrderStatus, Role, INITIAL_STATUS, ADMIN_DEFAULT_STATUSES, LEGACY_STATUS_MAP,
    transition, contact_visible,
)
from tutormatch.extensions import db
from tutormatch.models.job import Job
from tutormatch.models.order import Order
from tutormatch.models.student_profile import StudentProfile
from tutormatch.services.job.job_service import JobService
from tutormatch.services.sync.change_feed import change_feed, EVENT_INSERT, EVENT_UPDATE
from tutormatch.services.sync.joins import attach_profiles
from tutormatch.services.sync.schema_probe import get_capabilities
from tutormatch.services.sync.store import commit
from tutormatch.utils.validators import validate_phone

# 申请中（按需求分组展示）与财务（待确认收款及已完成）两类订单
APPLICATION_STATUSES = frozenset({OrderStatus.APPLYING, OrderStatus.PARENT_APPROVED})
FINANCE_STATUSES = frozenset({OrderStatus.PAYMENT_PENDING, OrderStatus.FINAL_APPROVED})

# 正在提交中的 (job_id, phone)，防止同一学生连续点击重复提交
_inflight = set()
_inflight_lock = threading.Lock()


def _with_job():
    """预加载订单对应的需求；旧表下 status 列保持延迟不取"""
    option = joinedload(Order.job)
    if get_capabilities().job_status:
        option = option.options(undefer(Job.status))
    return option


def _order_row(order):
    """变更通知用的最小行内容"""
    return {'student_contact': order.student_contact, 'job_id': order.job_id}


class OrderService:
    """订单流程：申请、家长确认、付款、管理员放号"""

    @staticmethod
    def get_order(order_id):
        order = Order.query.options(_with_job()).filter(Order.id == order_id).first()
        if not order:
            raise NotFound("订单不存在")
        return order

    @staticmethod
    def active_order_for(job_id, phone):
        """某学生在某需求上未被拒绝的订单"""
        return (
            Order.query
            .filter(
                Order.job_id == job_id,
                Order.student_contact == phone,
                Order.status != OrderStatus.REJECTED.value,
            )
            .first()
        )

    @staticmethod
    def submit_application(job_id, phone):
        """
        学生申请接单

        需求必须在架，学生必须已有简历并满足性别要求，且在该需求上没有未被拒绝的订单。
        之前被拒绝的订单保留为历史记录，可以重新申请。
        :return: 新建的 Order
        """
        if not validate_phone(phone):
            raise BusinessRuleError("手机号必须是 11 位数字")

        key = (int(job_id), phone)
        with _inflight_lock:
            if key in _inflight:
                raise BusinessRuleError("申请正在提交，请勿重复点击")
            _inflight.add(key)

        try:
            job = JobService.get_job(job_id)
            if JobService.current_status(job) != JobStatus.PUBLISHED:
                raise BusinessRuleError("该需求当前不接受申请")

            profile = db.session.get(StudentProfile, phone)
            if not profile:
                raise BusinessRuleError("请先完善简历")

            if not sex_requirement_met(job.sex_requirement, profile.gender):
                current_app.logger.warning(
                    f"申请被拒绝，性别不符: 需求 {job.id} 要求 {job.sex_requirement}，学生 {phone} 为 {profile.gender}"
                )
                raise BusinessRuleError("该需求对教员性别有要求，您不符合条件")

            if OrderService.active_order_for(job.id, phone):
                current_app.logger.warning(f"重复申请: 需求 {job.id} 学生 {phone}")
                raise BusinessRuleError("已申请过此职位，请查看'我的订单'。")

            order = Order(job_id=job.id, student_contact=phone, status=INITIAL_STATUS.value)
            db.session.add(order)
            commit("申请")
        finally:
            with _inflight_lock:
                _inflight.discard(key)

        current_app.logger.info(f"新申请: 订单 {order.id} 需求 {job.id} 学生 {phone}")
        change_feed.publish('orders', EVENT_INSERT, _order_row(order))
        return order

    @staticmethod
    def update_order_status(order_id, target, role, actor=None):
        """
        按流转表变更订单状态

        家长只能处理自己需求下的订单，学生只能处理自己的订单。
        变更为 final_approved 必须走 confirm_payment，以便同时下架需求。
        """
        target = OrderStatus.parse(target)
        role = Role(role)
        if target == OrderStatus.FINAL_APPROVED:
            if role != Role.ADMIN:
                raise PermissionDenied("只有管理员可以确认收款")
            return OrderService.confirm_payment(order_id)

        order = OrderService.get_order(order_id)
        if role == Role.PARENT:
            JobService.ensure_owner(order.job, actor)
        elif role == Role.STUDENT and order.student_contact != actor:
            raise PermissionDenied("只能操作自己的订单")

        old_status = order.status
        order.status = transition(order.status, target, role).value
        commit("更新订单状态")

        current_app.logger.info(f"订单 {order.id} 状态 {old_status} -> {order.status}（{role.value}）")
        change_feed.publish('orders', EVENT_UPDATE, _order_row(order))
        return order

    @staticmethod
    def confirm_student_payment(order_id, phone):
        """学生声明已付款，不做任何核验"""
        return OrderService.update_order_status(order_id, OrderStatus.PAYMENT_PENDING, Role.STUDENT, phone)

    @staticmethod
    def confirm_payment(order_id):
        """
        管理员确认收款：订单变为 final_approved，需求同时标记为 taken

        两处修改在同一事务中提交，任一失败则都不生效。
        """
        order = OrderService.get_order(order_id)
        job = JobService.get_job(order.job_id)

        new_status = transition(order.status, OrderStatus.FINAL_APPROVED, Role.ADMIN)
        old_job_status = JobService.mark_taken(job)
        order.status = new_status.value
        commit("确认收款")

        current_app.logger.info(f"订单 {order.id} 已确认收款，需求 {job.id} 已下架")
        change_feed.publish('orders', EVENT_UPDATE, _order_row(order))
        change_feed.publish(
            'jobs', EVENT_UPDATE,
            {'contact_phone': job.contact_phone, 'status': JobStatus.TAKEN.value},
            previous={'status': old_job_status.value},
        )
        return order

    @staticmethod
    def serialize_for_student(order, profile=None):
        """学生视角：只有成交的订单才带家长联系方式"""
        data = order.to_dict()
        job = order.job
        data['job'] = JobService.serialize(job, include_contact=contact_visible(order.status))
        data['job_taken'] = data['job']['status'] == JobStatus.TAKEN.value
        data['fee'] = fee_for_job(job).to_dict()
        data['is_recommended'] = is_recommended(job, profile)
        return data

    @staticmethod
    def list_orders_for_student(phone):
        """学生的订单，连同需求信息，按申请时间倒序"""
        orders = (
            Order.query.options(_with_job())
            .filter(Order.student_contact == phone)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all()
        )
        profile = db.session.get(StudentProfile, phone)
        return [OrderService.serialize_for_student(o, profile) for o in orders]

    @staticmethod
    def list_orders_for_admin(statuses=None):
        """
        管理端订单列表：订单 + 需求（含家长联系方式）+ 学生简历

        :param statuses: 需要的订单状态集合，默认 ADMIN_DEFAULT_STATUSES
        """
        statuses = statuses or ADMIN_DEFAULT_STATUSES
        values = sorted(OrderStatus.parse(s).value for s in statuses)
        orders = (
            Order.query.options(_with_job())
            .filter(Order.status.in_(values))
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all()
        )
        rows = []
        for order in orders:
            row = order.to_dict()
            row['job'] = JobService.serialize(order.job, include_contact=True)
            row['fee'] = fee_for_job(order.job).to_dict()
            rows.append(row)
        return attach_profiles(rows)

    @staticmethod
    def group_by_job(order_rows):
        """按需求分组，保持原有顺序"""
        groups = OrderedDict()
        for row in order_rows:
            group = groups.setdefault(row['job_id'], {'job': row['job'], 'orders': []})
            group['orders'].append(row)
        return list(groups.values())

    @staticmethod
    def list_applications_for_admin():
        """申请中的订单按需求分组"""
        return OrderService.group_by_job(OrderService.list_orders_for_admin(APPLICATION_STATUSES))

    @staticmethod
    def list_finance_for_admin():
        return OrderService.list_orders_for_admin(FINANCE_STATUSES)

    @staticmethod
    def list_jobs_with_candidates(phone, password=None):
        """
        家长视角：自己的需求及每个需求下的申请人（含简历）

        :param password: 管理密码；为 None 时表示调用方已凭令牌核验身份
        """
        if password is None:
            jobs = JobService.list_jobs_owned_by(phone)
        else:
            jobs = JobService.list_jobs_for_parent(phone, password)
        job_ids = [job.id for job in jobs]
        orders = (
            Order.query.filter(Order.job_id.in_(job_ids))
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all()
        )
        candidates = attach_profiles([o.to_dict() for o in orders])

        result = []
        for job in jobs:
            data = JobService.serialize(job, include_contact=True)
            data['candidates'] = [c for c in candidates if c['job_id'] == job.id]
            result.append(data)
        return result

    @staticmethod
    def migrate_legacy_orders():
        """把旧版两段式审核的订单状态迁移到当前流程，返回迁移条数"""
        count = 0
        for legacy, current in LEGACY_STATUS_MAP.items():
            count += (
                Order.query.filter(Order.status == legacy.value)
                .update({Order.status: current.value}, synchronize_session=False)
            )
        commit("迁移旧订单状态")
        if count:
            current_app.logger.info(f"已迁移旧版订单 {count} 条")
            change_feed.publish('orders', EVENT_UPDATE)
        return count
