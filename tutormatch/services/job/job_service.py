# tutormatch/services/job/job_service.py
import hmac

from flask import current_app
from sqlalchemy import column, insert, select, table
from sqlalchemy.orm import undefer

from tutormatch.core.errors import BusinessRuleError, NotFound, PermissionDenied
from tutormatch.core.pricing.fee_tables import MIN_FREQUENCY, MAX_FREQUENCY
from tutormatch.core.workflow.job_status import (
    JobStatus, SexRequirement, job_transition, is_active_flag, status_from_legacy,
)
from tutormatch.core.workflow.order_status import Role
from tutormatch.extensions import db
from tutormatch.models.base import utcnow
from tutormatch.models.job import Job
from tutormatch.models.order import Order
from tutormatch.services.sync.change_feed import (
    change_feed, EVENT_INSERT, EVENT_UPDATE, EVENT_DELETE,
)
from tutormatch.services.sync.schema_probe import get_capabilities
from tutormatch.services.sync.store import commit
from tutormatch.utils.validators import validate_phone

JOB_FIELDS = (
    'title', 'grade', 'subject', 'price', 'frequency', 'address',
    'contact_name', 'contact_phone', 'manage_password', 'sex_requirement',
)


class JobService:
    """家教需求的发布、审核、下架与删除"""

    @staticmethod
    def _query():
        if get_capabilities().job_status:
            return Job.query.options(undefer(Job.status))
        # status 列在模型上延迟加载，旧表下从不取出
        return Job.query

    @staticmethod
    def current_status(job):
        if get_capabilities().job_status:
            return JobStatus.parse(job.status)
        return status_from_legacy(job.is_active)

    @staticmethod
    def serialize(job, include_contact=False):
        return job.to_dict(
            include_contact=include_contact,
            has_status_column=get_capabilities().job_status,
        )

    @staticmethod
    def get_job(job_id):
        job = JobService._query().filter(Job.id == job_id).first()
        if not job:
            raise NotFound("需求不存在")
        return job

    @staticmethod
    def create_job(data):
        """
        家长提交需求，进入待审核状态

        :param data: 需求字段字典
        :return: Job
        """
        if not data.get('title') or not data.get('contact_phone') or not data.get('price'):
            raise BusinessRuleError("请填写完整信息")
        if not validate_phone(data['contact_phone']):
            raise BusinessRuleError("提交失败：手机号必须是 11 位数字")

        frequency = data.get('frequency') or MIN_FREQUENCY
        if not MIN_FREQUENCY <= int(frequency) <= MAX_FREQUENCY:
            raise BusinessRuleError(f"每周次数必须在 {MIN_FREQUENCY}-{MAX_FREQUENCY} 之间")

        sex_requirement = data.get('sex_requirement') or SexRequirement.UNLIMITED.value
        if sex_requirement not in {s.value for s in SexRequirement}:
            raise BusinessRuleError("性别要求只能是 male、female 或 unlimited")

        values = {key: data.get(key) for key in JOB_FIELDS}
        values['frequency'] = int(frequency)
        values['sex_requirement'] = sex_requirement
        values['is_active'] = False

        if get_capabilities().job_status:
            job = Job(status=JobStatus.PENDING.value, **values)
            db.session.add(job)
            commit("发布需求")
        else:
            # 直接写表，避免 ORM 带上不存在的 status 列
            values['created_at'] = values['updated_at'] = utcnow()
            legacy_jobs = table('jobs', *(column(key, Job.__table__.c[key].type) for key in values))
            db.session.execute(insert(legacy_jobs).values(**values))
            commit("发布需求")
            job = (
                JobService._query()
                .filter(Job.contact_phone == values['contact_phone'], Job.title == values['title'])
                .order_by(Job.id.desc())
                .first()
            )

        current_app.logger.info(f"新需求待审核: id={job.id} 标题={job.title}")
        change_feed.publish('jobs', EVENT_INSERT, {'contact_phone': job.contact_phone, 'status': JobStatus.PENDING.value})
        return job

    @staticmethod
    def list_published_jobs(exclude_phone=None):
        """
        需求市场：已上架的需求，按发布时间倒序

        :param exclude_phone: 学生手机号，排除该学生已申请过的需求
        """
        query = JobService._query()
        if get_capabilities().job_status:
            query = query.filter(Job.status == JobStatus.PUBLISHED.value)
        else:
            query = query.filter(Job.is_active.is_(True))

        if exclude_phone:
            applied = select(Order.job_id).where(Order.student_contact == exclude_phone)
            query = query.filter(~Job.id.in_(applied))

        return query.order_by(Job.created_at.desc(), Job.id.desc()).all()

    @staticmethod
    def list_pending_jobs():
        """待审核的新需求，先提交的排在前面"""
        if not get_capabilities().job_status:
            # 旧表无法区分待审核与已拒绝
            return []
        return (
            JobService._query().filter(Job.status == JobStatus.PENDING.value)
            .order_by(Job.created_at.asc(), Job.id.asc())
            .all()
        )

    @staticmethod
    def list_jobs_owned_by(phone):
        """某手机号发布的全部需求，调用方负责核验身份"""
        return (
            JobService._query()
            .filter(Job.contact_phone == phone)
            .order_by(Job.created_at.desc(), Job.id.desc())
            .all()
        )

    @staticmethod
    def list_jobs_for_parent(phone, password):
        """家长凭发布时的手机号和管理密码查看自己的需求"""
        if not phone or not password:
            raise BusinessRuleError("请输入手机号和密码")
        jobs = [
            job for job in JobService.list_jobs_owned_by(phone)
            if job.manage_password and hmac.compare_digest(job.manage_password.encode("utf-8"), password.encode("utf-8"))
        ]
        if not jobs:
            current_app.logger.warning(f"家长登录失败: {phone}")
            raise PermissionDenied("未找到记录，请检查手机号或密码是否正确")
        return jobs

    @staticmethod
    def ensure_owner(job, phone):
        if not phone or not hmac.compare_digest(job.contact_phone.encode('utf-8'), phone.encode('utf-8')):
            raise PermissionDenied("只能管理自己发布的需求")

    @staticmethod
    def apply_status(job, target, role):
        """
        在当前事务中修改需求状态，不提交

        is_active 始终与 status=published 保持一致。
        """
        new_status = job_transition(JobService.current_status(job), target, role)
        if get_capabilities().job_status:
            job.status = new_status.value
        job.is_active = is_active_flag(new_status)
        return new_status

    @staticmethod
    def mark_taken(job):
        """
        收款确认后需求下架，已是 taken 时不再改动

        同一需求可能有多名学生先后付款，后确认的订单不应被需求状态拦住。
        旧表下未上架即视为已下架。
        :return: 修改前的状态
        """
        old_status = JobService.current_status(job)
        already_taken = old_status == JobStatus.TAKEN or (
            not get_capabilities().job_status and not job.is_active
        )
        if not already_taken:
            JobService.apply_status(job, JobStatus.TAKEN, Role.SYSTEM)
        return old_status

    @staticmethod
    def update_job_status(job_id, target, role=Role.ADMIN):
        """审核需求（上架/拒绝）或重新上架"""
        job = JobService.get_job(job_id)
        old_status = JobService.current_status(job)
        new_status = JobService.apply_status(job, target, role)
        commit("更新需求状态")
        current_app.logger.info(f"需求 {job.id} 状态 {old_status.value} -> {new_status.value}")
        change_feed.publish(
            'jobs', EVENT_UPDATE,
            {'contact_phone': job.contact_phone, 'status': new_status.value},
            previous={'status': old_status.value},
        )
        return job

    @staticmethod
    def relist_job(job_id):
        """已成交的需求重新上架，原有订单保持不变"""
        return JobService.update_job_status(job_id, JobStatus.PUBLISHED, Role.ADMIN)

    @staticmethod
    def delete_job(job_id, role, actor=None):
        """
        删除需求，先删除其下所有订单

        家长只能删除自己发布的需求，管理员可以删除任意需求。
        :return: 一并删除的订单数
        """
        role = Role(role)
        job = JobService.get_job(job_id)
        if role == Role.PARENT:
            JobService.ensure_owner(job, actor)
        elif role != Role.ADMIN:
            raise PermissionDenied("无权删除需求")

        orders = Order.query.filter(Order.job_id == job.id).all()
        deleted_rows = [o.to_dict() for o in orders]
        job_row = {'contact_phone': job.contact_phone, 'status': JobService.current_status(job).value}

        for order in orders:
            db.session.delete(order)
        db.session.flush()
        db.session.delete(job)
        commit("删除需求")

        current_app.logger.info(f"需求 {job_id} 已删除，连带删除订单 {len(deleted_rows)} 条")
        for row in deleted_rows:
            change_feed.publish('orders', EVENT_DELETE, row)
        change_feed.publish('jobs', EVENT_DELETE, job_row)
        return len(deleted_rows)
