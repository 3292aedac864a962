"""
变更通知

每张表一个通知通道，订阅时可以附带一个列的等值过滤条件，
例如 orders 表上 student_contact=13800000000。
通知只表示"有东西变了"，订阅方收到后自行重新查询，不依赖通知内容做增量更新。

进程内订阅通过回调投递；浏览器等远程客户端通过 Socket.IO 房间投递，
房间名为 "表名" 或 "表名:列=值"。
"""
import threading
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from flask import current_app, has_app_context

from tutormatch.extensions import socketio

EVENT_INSERT = 'INSERT'
EVENT_UPDATE = 'UPDATE'
EVENT_DELETE = 'DELETE'

# 允许作为过滤条件的列
FILTERABLE_COLUMNS = {
    'jobs': ('contact_phone', 'status'),
    'orders': ('student_contact', 'job_id'),
    'profiles': ('phone',),
}


def room_name(table, column=None, value=None):
    if column is None:
        return table
    return f"{table}:{column}={value}"


def validate_filter(table, row_filter):
    """校验订阅的表和过滤条件，返回 (column, value) 或 None"""
    if table not in FILTERABLE_COLUMNS:
        raise ValueError(f"不支持订阅的表: {table}")
    if not row_filter:
        return None
    if len(row_filter) != 1:
        raise ValueError("只支持单列等值过滤")
    column, value = next(iter(row_filter.items()))
    if column not in FILTERABLE_COLUMNS[table]:
        raise ValueError(f"{table} 表不支持按 {column} 过滤")
    return column, value


@dataclass
class ChangeEvent:
    table: str
    event: str


@dataclass
class Subscription:
    id: int
    table: str
    on_change: Callable[[ChangeEvent], None]
    row_filter: Optional[Dict[str, object]] = field(default=None)

    def matches(self, table, *rows):
        if table != self.table:
            return False
        if not self.row_filter:
            return True
        column, value = next(iter(self.row_filter.items()))
        return any(str((row or {}).get(column)) == str(value) for row in rows)


class ChangeFeed:
    """进程内的变更订阅表，线程安全"""

    def __init__(self):
        self._lock = threading.RLock()
        self._subscriptions: Dict[int, Subscription] = {}
        self._next_id = 1

    def subscribe(self, table, row_filter=None, on_change=None):
        """
        注册一个长期订阅

        :param table: 表名 jobs/orders/profiles
        :param row_filter: 单列等值过滤，如 {'student_contact': '138...'}，None 表示整表
        :param on_change: 回调，参数为 ChangeEvent
        :return: 订阅ID，用于取消订阅
        """
        if on_change is None:
            raise ValueError("on_change 不能为空")
        parsed = validate_filter(table, row_filter)
        with self._lock:
            sub_id = self._next_id
            self._next_id += 1
            self._subscriptions[sub_id] = Subscription(
                id=sub_id,
                table=table,
                on_change=on_change,
                row_filter=dict([parsed]) if parsed else None,
            )
        return sub_id

    def unsubscribe(self, sub_id):
        with self._lock:
            return self._subscriptions.pop(sub_id, None) is not None

    def clear(self):
        with self._lock:
            self._subscriptions.clear()

    def subscriber_count(self, table=None):
        with self._lock:
            if table is None:
                return len(self._subscriptions)
            return sum(1 for s in self._subscriptions.values() if s.table == table)

    def publish(self, table, event, row=None, previous=None):
        """
        通知一次变更，应在事务提交之后调用

        :param row: 变更行（删除时为删除前的内容），只用于匹配过滤条件
        :param previous: 更新前的列值，如 {'status': 'published'}；
            按旧值过滤的订阅方同样会收到通知，以便得知行已离开其结果集
        """
        rows = [row or {}, previous or {}]
        with self._lock:
            targets = [s for s in self._subscriptions.values() if s.matches(table, *rows)]

        change = ChangeEvent(table=table, event=event)
        for sub in targets:
            try:
                sub.on_change(change)
            except Exception:
                # 单个订阅方出错不影响写入方和其他订阅方
                if has_app_context():
                    current_app.logger.error(f"变更回调执行失败: 订阅 {sub.id} 表 {table}", exc_info=True)

        self._emit_to_rooms(table, event, rows)

    def _emit_to_rooms(self, table, event, rows):
        # Socket.IO 尚未绑定应用时只做进程内投递
        if getattr(socketio, 'server', None) is None:
            return
        payload = {'table': table, 'event': event}
        rooms = [room_name(table)]
        for row in rows:
            for column in FILTERABLE_COLUMNS.get(table, ()):
                if row.get(column) is None:
                    continue
                room = room_name(table, column, row[column])
                if room not in rooms:
                    rooms.append(room)
        for room in rooms:
            socketio.emit('db_change', payload, to=room)


change_feed = ChangeFeed()
