"""
各角色的看板

看板持有本地列表状态，每张相关的表保持一个订阅，收到任何变更通知都重新执行
列表查询（不做增量修补）。写操作先更新本地状态，再写数据库；写入失败时记录
数据库返回的原始错误信息，并重新查询以恢复到权威状态。
"""
from flask import current_app

from tutormatch.core.errors import TutorMatchError
from tutormatch.core.pricing.fee_calculator import fee_for_job
from tutormatch.core.recommendation.matcher import is_recommended
from tutormatch.core.workflow.job_status import JobStatus
from tutormatch.core.workflow.order_status import OrderStatus, Role
from tutormatch.extensions import db
from tutormatch.models.student_profile import StudentProfile
from tutormatch.services.job.job_service import JobService
from tutormatch.services.order.order_service import OrderService
from tutormatch.services.sync.change_feed import change_feed as default_feed


class Dashboard:
    """看板基类"""

    def __init__(self, feed=None):
        self.feed = feed or default_feed
        self.data = None
        self.error = None
        self.notice = None
        self.refresh_count = 0
        self._subscriptions = []

    def subscriptions(self):
        """返回 [(table, row_filter)]"""
        raise NotImplementedError

    def fetch(self):
        raise NotImplementedError

    def open(self):
        for table, row_filter in self.subscriptions():
            self._subscriptions.append(self.feed.subscribe(table, row_filter, self._on_change))
        self.refresh()
        return self

    def close(self):
        for sub_id in self._subscriptions:
            self.feed.unsubscribe(sub_id)
        self._subscriptions = []

    def refresh(self):
        try:
            self.data = self.fetch()
            self.error = None
        except TutorMatchError as e:
            self.error = e.message
        self.refresh_count += 1
        return self.data

    def _on_change(self, change):
        self.refresh()

    def perform(self, optimistic, remote, success_notice):
        """
        先更新本地状态，再执行远程写入

        :param optimistic: 修改 self.data 的函数
        :param remote: 执行写入的函数
        :return: 是否成功
        """
        if optimistic is not None and self.data is not None:
            optimistic()
        try:
            remote()
        except TutorMatchError as e:
            current_app.logger.warning(f"{type(self).__name__} 操作失败: {e.message}")
            self.error = e.message
            self.notice = None
            self.refresh()
            # refresh 成功会清空 error，这里保留失败原因给调用方展示
            self.error = e.message
            return False
        self.notice = success_notice
        return True


class StudentDashboard(Dashboard):
    """学生看板：需求市场 + 我的订单"""

    def __init__(self, phone, feed=None):
        super().__init__(feed)
        self.phone = phone

    def subscriptions(self):
        return [
            ('orders', {'student_contact': self.phone}),
            ('jobs', None),
        ]

    def fetch(self):
        profile = db.session.get(StudentProfile, self.phone)
        market = []
        for job in JobService.list_published_jobs(exclude_phone=self.phone):
            item = JobService.serialize(job)
            item['fee'] = fee_for_job(job).to_dict()
            item['is_recommended'] = is_recommended(job, profile)
            market.append(item)
        return {
            'market': market,
            'orders': OrderService.list_orders_for_student(self.phone),
        }

    def order_for_job(self, job_id):
        for order in (self.data or {}).get('orders', []):
            if order['job_id'] == job_id:
                return order
        return None

    def apply(self, job_id):
        def move_to_orders():
            self.data['market'] = [j for j in self.data['market'] if j['id'] != job_id]

        return self.perform(
            move_to_orders,
            lambda: OrderService.submit_application(job_id, self.phone),
            "申请成功！请等待审核。",
        )

    def confirm_payment(self, order_id):
        def mark_pending():
            for order in self.data['orders']:
                if order['id'] == order_id:
                    order['status'] = OrderStatus.PAYMENT_PENDING.value

        return self.perform(
            mark_pending,
            lambda: OrderService.confirm_student_payment(order_id, self.phone),
            "已确认付款，请等待放号。",
        )


class ParentDashboard(Dashboard):
    """家长看板：自己的需求和申请人"""

    def __init__(self, phone, password, feed=None):
        super().__init__(feed)
        self.phone = phone
        self.password = password

    def subscriptions(self):
        # 订单表无法按家长过滤，整表订阅后重新查询
        return [
            ('jobs', {'contact_phone': self.phone}),
            ('orders', None),
        ]

    def fetch(self):
        return OrderService.list_jobs_with_candidates(self.phone, self.password)

    def review_candidate(self, order_id, approve):
        target = OrderStatus.PARENT_APPROVED if approve else OrderStatus.REJECTED

        def set_local():
            for job in self.data:
                for candidate in job['candidates']:
                    if candidate['id'] == order_id:
                        candidate['status'] = target.value

        return self.perform(
            set_local,
            lambda: OrderService.update_order_status(order_id, target, Role.PARENT, self.phone),
            "已同意" if approve else "已拒绝",
        )

    def delete_job(self, job_id):
        def drop_local():
            self.data = [j for j in self.data if j['id'] != job_id]

        return self.perform(
            drop_local,
            lambda: JobService.delete_job(job_id, Role.PARENT, self.phone),
            "删除成功",
        )


class AdminDashboard(Dashboard):
    """管理员看板：申请、财务、待审核需求"""

    def __init__(self, statuses=None, feed=None):
        super().__init__(feed)
        self.statuses = statuses

    def subscriptions(self):
        return [('orders', None), ('jobs', None)]

    def fetch(self):
        orders = OrderService.list_orders_for_admin(self.statuses)
        return {
            'orders': orders,
            'pending_jobs': [JobService.serialize(j, include_contact=True) for j in JobService.list_pending_jobs()],
        }

    def orders_in(self, *statuses):
        wanted = {OrderStatus.parse(s).value for s in statuses}
        return [o for o in (self.data or {}).get('orders', []) if o['status'] in wanted]

    def _set_order_status(self, order_id, status):
        def set_local():
            for order in self.data['orders']:
                if order['id'] == order_id:
                    order['status'] = status.value
        return set_local

    def approve_application(self, order_id):
        return self.perform(
            self._set_order_status(order_id, OrderStatus.PARENT_APPROVED),
            lambda: OrderService.update_order_status(order_id, OrderStatus.PARENT_APPROVED, Role.ADMIN),
            "已同意申请，等待学生付款",
        )

    def reject_order(self, order_id):
        def drop_local():
            self.data['orders'] = [o for o in self.data['orders'] if o['id'] != order_id]

        return self.perform(
            drop_local,
            lambda: OrderService.update_order_status(order_id, OrderStatus.REJECTED, Role.ADMIN),
            "已拒绝",
        )

    def confirm_payment(self, order_id):
        return self.perform(
            self._set_order_status(order_id, OrderStatus.FINAL_APPROVED),
            lambda: OrderService.confirm_payment(order_id),
            "收款成功！该职位已标记为'已接单'并自动下架。",
        )

    def review_job(self, job_id, publish):
        target = JobStatus.PUBLISHED if publish else JobStatus.REJECTED

        def drop_pending():
            self.data['pending_jobs'] = [j for j in self.data['pending_jobs'] if j['id'] != job_id]

        return self.perform(
            drop_pending,
            lambda: JobService.update_job_status(job_id, target, Role.ADMIN),
            "已上架" if publish else "已拒绝",
        )

    def relist_job(self, job_id):
        return self.perform(None, lambda: JobService.relist_job(job_id), "已重新上架！")

    def delete_job(self, job_id):
        def drop_local():
            self.data['orders'] = [o for o in self.data['orders'] if o['job_id'] != job_id]
            self.data['pending_jobs'] = [j for j in self.data['pending_jobs'] if j['id'] != job_id]

        return self.perform(
            drop_local,
            lambda: JobService.delete_job(job_id, Role.ADMIN),
            "删除成功",
        )
