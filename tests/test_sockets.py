import pytest

from tutormatch.core.workflow.order_status import OrderStatus, Role
from tutormatch.extensions import socketio
from tutormatch.services.job.job_service import JobService
from tutormatch.services.order.order_service import OrderService

from tests.conftest import OTHER_STUDENT_PHONE, PARENT_PHONE, STUDENT_PHONE


@pytest.fixture
def socket_client(app):
    client = socketio.test_client(app)
    yield client
    if client.is_connected():
        client.disconnect()


def _changes(client):
    return [msg['args'][0] for msg in client.get_received() if msg['name'] == 'db_change']


def test_subscribe_acknowledges_room(socket_client):
    ack = socket_client.emit('subscribe', {'table': 'orders', 'filter': {'student_contact': STUDENT_PHONE}},
                             callback=True)
    assert ack == {'success': True, 'room': f'orders:student_contact={STUDENT_PHONE}'}


def test_invalid_subscription_is_refused(socket_client):
    ack = socket_client.emit('subscribe', {'table': 'orders', 'filter': {'status': 'applying'}}, callback=True)
    assert ack['success'] is False


def test_filtered_room_receives_only_matching_changes(socket_client, make_job, make_profile):
    make_profile()
    make_profile(OTHER_STUDENT_PHONE)
    job = make_job()
    socket_client.emit('subscribe', {'table': 'orders', 'filter': {'student_contact': STUDENT_PHONE}},
                       callback=True)
    socket_client.get_received()

    OrderService.submit_application(job.id, OTHER_STUDENT_PHONE)
    assert _changes(socket_client) == []

    OrderService.submit_application(job.id, STUDENT_PHONE)
    assert _changes(socket_client) == [{'table': 'orders', 'event': 'INSERT'}]


def test_whole_table_room_and_unsubscribe(socket_client, make_job):
    socket_client.emit('subscribe', {'table': 'jobs'}, callback=True)
    make_job()
    # 发布 + 审核上架各一次
    assert [c['event'] for c in _changes(socket_client)] == ['INSERT', 'UPDATE']

    socket_client.emit('unsubscribe', {'table': 'jobs'}, callback=True)
    make_job()
    assert _changes(socket_client) == []


def test_status_room_is_told_when_job_leaves_marketplace(socket_client, make_job, make_profile):
    make_profile()
    job = make_job()
    order = OrderService.submit_application(job.id, STUDENT_PHONE)
    OrderService.update_order_status(order.id, OrderStatus.PARENT_APPROVED, Role.PARENT, PARENT_PHONE)
    OrderService.confirm_student_payment(order.id, STUDENT_PHONE)

    socket_client.emit('subscribe', {'table': 'jobs', 'filter': {'status': 'published'}}, callback=True)
    socket_client.get_received()

    OrderService.confirm_payment(order.id)
    assert _changes(socket_client) == [{'table': 'jobs', 'event': 'UPDATE'}]

    JobService.relist_job(job.id)
    assert _changes(socket_client) == [{'table': 'jobs', 'event': 'UPDATE'}]

    JobService.delete_job(job.id, Role.ADMIN)
    assert _changes(socket_client) == [{'table': 'jobs', 'event': 'DELETE'}]
