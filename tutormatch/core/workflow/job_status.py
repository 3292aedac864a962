"""家教需求（Job）的生命周期"""
from __future__ import annotations

from enum import Enum

from tutormatch.core.errors import InvalidTransition, PermissionDenied
from tutormatch.core.workflow.order_status import Role


class JobStatus(str, Enum):
    PENDING = "pending"        # 家长已提交，等待审核
    PUBLISHED = "published"    # 已上架，学生可见
    REJECTED = "rejected"      # 审核未通过
    TAKEN = "taken"            # 已成交，下架

    @classmethod
    def parse(cls, value) -> "JobStatus":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidTransition(f"未知的需求状态: {value}")


class SexRequirement(str, Enum):
    MALE = "male"
    FEMALE = "female"
    UNLIMITED = "unlimited"


JOB_TRANSITIONS = {
    (JobStatus.PENDING, JobStatus.PUBLISHED): frozenset({Role.ADMIN}),
    (JobStatus.PENDING, JobStatus.REJECTED): frozenset({Role.ADMIN}),
    # 订单最终确认时由系统自动下架
    (JobStatus.PUBLISHED, JobStatus.TAKEN): frozenset({Role.SYSTEM}),
    # 重新上架
    (JobStatus.TAKEN, JobStatus.PUBLISHED): frozenset({Role.ADMIN}),
}


def job_transition(current, target, role) -> JobStatus:
    current = JobStatus.parse(current)
    target = JobStatus.parse(target)
    role = Role(role)

    roles = JOB_TRANSITIONS.get((current, target))
    if roles is None:
        raise InvalidTransition(
            f"需求状态不能从 {current.value} 变更为 {target.value}",
            details={'from': current.value, 'to': target.value},
        )
    if role not in roles:
        raise PermissionDenied(f"{role.value} 无权将需求变更为 {target.value}")
    return target


def is_listed(status) -> bool:
    """是否出现在公开的需求市场"""
    return JobStatus.parse(status) == JobStatus.PUBLISHED


def is_active_flag(status) -> bool:
    """旧字段 is_active 与状态保持一致"""
    return is_listed(status)


def status_from_legacy(is_active) -> JobStatus:
    """旧表没有 status 列时，由 is_active 推断状态"""
    return JobStatus.PUBLISHED if is_active else JobStatus.PENDING


def sex_requirement_met(requirement, gender) -> bool:
    """学生性别是否满足需求的性别要求"""
    if not requirement or requirement == SexRequirement.UNLIMITED.value:
        return True
    return gender == requirement
