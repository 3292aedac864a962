from flask import current_app, request
from flask_socketio import join_room, leave_room

from tutormatch.extensions import socketio
from tutormatch.services.sync.change_feed import room_name, validate_filter


def _room_for(data):
    """从订阅请求解析房间名，请求不合法时返回 (None, 错误信息)"""
    data = data or {}
    table = data.get('table')
    try:
        parsed = validate_filter(table, data.get('filter'))
    except ValueError as e:
        return None, str(e)
    if parsed is None:
        return room_name(table), None
    column, value = parsed
    return room_name(table, column, value), None


@socketio.on('connect')
def handle_connect():
    current_app.logger.info(f"客户端已连接: {request.sid}")


@socketio.on('disconnect')
def handle_disconnect(*args):
    current_app.logger.info(f"客户端已断开: {request.sid}")


@socketio.on('subscribe')
def handle_subscribe(data):
    """
    订阅一张表的变更

    data: {"table": "orders", "filter": {"student_contact": "138..."}}
    之后每次匹配的变更都会收到 db_change {table, event}。
    """
    room, error = _room_for(data)
    if room is None:
        current_app.logger.warning(f"订阅请求无效: {error}")
        return {'success': False, 'message': error}
    join_room(room)
    return {'success': True, 'room': room}


@socketio.on('unsubscribe')
def handle_unsubscribe(data):
    room, error = _room_for(data)
    if room is None:
        return {'success': False, 'message': error}
    leave_room(room)
    return {'success': True, 'room': room}
