"""
订单状态机

订单（学生对某个家教需求的申请）的全部状态都定义在 OrderStatus 中，
包含当前的五段式流程和早期版本遗留的两段式审核（pending/approved）。
状态只能通过 transition() 计算，不提供自由设置状态的入口。
"""
from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, Tuple

from tutormatch.core.errors import InvalidTransition, PermissionDenied


class Role(str, Enum):
    """触发流转的角色"""
    STUDENT = "student"
    PARENT = "parent"
    ADMIN = "admin"
    SYSTEM = "system"


class OrderStatus(str, Enum):
    APPLYING = "applying"                # 学生已申请，等待家长/平台确认
    PARENT_APPROVED = "parent_approved"  # 家长同意，学生可以付款
    PAYMENT_PENDING = "payment_pending"  # 学生声明已付款，等待管理员放号
    FINAL_APPROVED = "final_approved"    # 管理员确认收款，联系方式已释放
    REJECTED = "rejected"

    # 早期两段式审核遗留的状态，仅用于兼容旧数据
    PENDING = "pending"
    APPROVED = "approved"

    @classmethod
    def parse(cls, value) -> "OrderStatus":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidTransition(f"未知的订单状态: {value}")


# 新订单一律从这里开始
INITIAL_STATUS = OrderStatus.APPLYING

# (from, to) -> 允许触发的角色
ORDER_TRANSITIONS: Dict[Tuple[OrderStatus, OrderStatus], FrozenSet[Role]] = {
    (OrderStatus.APPLYING, OrderStatus.PARENT_APPROVED): frozenset({Role.PARENT, Role.ADMIN}),
    (OrderStatus.APPLYING, OrderStatus.REJECTED): frozenset({Role.PARENT, Role.ADMIN}),
    (OrderStatus.PARENT_APPROVED, OrderStatus.PAYMENT_PENDING): frozenset({Role.STUDENT}),
    (OrderStatus.PARENT_APPROVED, OrderStatus.REJECTED): frozenset({Role.ADMIN}),
    (OrderStatus.PAYMENT_PENDING, OrderStatus.FINAL_APPROVED): frozenset({Role.ADMIN}),
    (OrderStatus.PAYMENT_PENDING, OrderStatus.REJECTED): frozenset({Role.ADMIN}),
    # 两段式审核
    (OrderStatus.PENDING, OrderStatus.APPROVED): frozenset({Role.ADMIN}),
    (OrderStatus.PENDING, OrderStatus.REJECTED): frozenset({Role.ADMIN}),
}

TERMINAL_STATUSES = frozenset({
    OrderStatus.FINAL_APPROVED,
    OrderStatus.APPROVED,
    OrderStatus.REJECTED,
})

# 学生可以看到家长联系方式的状态
CONTACT_VISIBLE_STATUSES = frozenset({
    OrderStatus.FINAL_APPROVED,
    OrderStatus.APPROVED,
})

# 管理端默认关注的状态
ADMIN_DEFAULT_STATUSES = frozenset({
    OrderStatus.APPLYING,
    OrderStatus.PARENT_APPROVED,
    OrderStatus.PAYMENT_PENDING,
    OrderStatus.FINAL_APPROVED,
})

# 旧数据迁移映射
LEGACY_STATUS_MAP = {
    OrderStatus.PENDING: OrderStatus.APPLYING,
    OrderStatus.APPROVED: OrderStatus.FINAL_APPROVED,
}


def is_active(status) -> bool:
    """未被拒绝的订单都算有效订单"""
    return OrderStatus.parse(status) != OrderStatus.REJECTED


def is_terminal(status) -> bool:
    return OrderStatus.parse(status) in TERMINAL_STATUSES


def contact_visible(status) -> bool:
    return OrderStatus.parse(status) in CONTACT_VISIBLE_STATUSES


def allowed_targets(status, role) -> list:
    """某角色在当前状态下可以流转到的状态"""
    current = OrderStatus.parse(status)
    role = Role(role)
    return [
        target for (source, target), roles in ORDER_TRANSITIONS.items()
        if source == current and role in roles
    ]


def transition(current, target, role) -> OrderStatus:
    """
    计算一次订单状态流转

    :param current: 当前状态
    :param target: 目标状态
    :param role: 触发角色
    :return: 新状态
    :raises InvalidTransition: 流转表中没有这条边
    :raises PermissionDenied: 有这条边，但该角色无权触发
    """
    current = OrderStatus.parse(current)
    target = OrderStatus.parse(target)
    role = Role(role)

    roles = ORDER_TRANSITIONS.get((current, target))
    if roles is None:
        raise InvalidTransition(
            f"订单状态不能从 {current.value} 变更为 {target.value}",
            details={'from': current.value, 'to': target.value},
        )
    if role not in roles:
        raise PermissionDenied(
            f"{role.value} 无权将订单从 {current.value} 变更为 {target.value}",
            details={'from': current.value, 'to': target.value, 'role': role.value},
        )
    return target


def migrate_legacy(status) -> OrderStatus:
    """把旧版状态映射到当前流程，新状态原样返回"""
    status = OrderStatus.parse(status)
    return LEGACY_STATUS_MAP.get(status, status)
