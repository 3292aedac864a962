from tutormatch.core.workflow.job_status import JobStatus
from tutormatch.core.workflow.order_status import OrderStatus, Role
from tutormatch.services.order.order_service import OrderService
from tutormatch.services.sync.change_feed import change_feed
from tutormatch.services.sync.dashboards import AdminDashboard, ParentDashboard, StudentDashboard

from tests.conftest import OTHER_STUDENT_PHONE, PARENT_PASSWORD, PARENT_PHONE, STUDENT_PHONE


def test_student_apply_moves_job_to_orders(make_job, make_profile):
    make_profile()
    job = make_job()
    board = StudentDashboard(STUDENT_PHONE).open()
    assert [j['id'] for j in board.data['market']] == [job.id]
    assert board.data['market'][0]['is_recommended'] is True

    assert board.apply(job.id) is True
    assert board.notice == "申请成功！请等待审核。"
    assert board.data['market'] == []
    assert board.order_for_job(job.id)['status'] == 'applying'


def test_failed_write_restores_authoritative_state(make_job, make_profile):
    make_profile(gender='female')
    job = make_job(sex_requirement='male')
    board = StudentDashboard(STUDENT_PHONE).open()

    assert board.apply(job.id) is False
    assert board.error == "该需求对教员性别有要求，您不符合条件"
    assert [j['id'] for j in board.data['market']] == [job.id]
    assert board.data['orders'] == []


def test_student_board_ignores_other_students_orders(make_job, make_profile):
    make_profile()
    make_profile(OTHER_STUDENT_PHONE)
    job = make_job()
    board = StudentDashboard(STUDENT_PHONE).open()
    before = board.refresh_count

    OrderService.submit_application(job.id, OTHER_STUDENT_PHONE)
    assert board.refresh_count == before


def test_two_admin_sessions_stay_in_sync(make_job, make_profile):
    make_profile()
    job = make_job()
    first = AdminDashboard().open()
    second = AdminDashboard().open()

    order = OrderService.submit_application(job.id, STUDENT_PHONE)
    assert [o['id'] for o in first.orders_in('applying')] == [order.id]
    assert [o['id'] for o in second.orders_in('applying')] == [order.id]

    assert first.approve_application(order.id)
    assert second.orders_in('applying') == []
    assert [o['id'] for o in second.orders_in(OrderStatus.PARENT_APPROVED)] == [order.id]


def test_admin_payment_flow(make_job, make_profile):
    make_profile()
    job = make_job()
    board = AdminDashboard().open()
    order = OrderService.submit_application(job.id, STUDENT_PHONE)

    # 学生尚未付款时确认收款失败，本地乐观状态被撤回
    assert board.confirm_payment(order.id) is False
    assert board.orders_in('applying')[0]['id'] == order.id
    assert board.error

    board.approve_application(order.id)
    OrderService.confirm_student_payment(order.id, STUDENT_PHONE)
    assert board.confirm_payment(order.id) is True
    assert board.orders_in('final_approved')[0]['job']['status'] == 'taken'

    assert board.relist_job(job.id) is True
    assert board.notice == "已重新上架！"


def test_admin_reviews_pending_jobs(make_job):
    job = make_job(status=JobStatus.PENDING)
    board = AdminDashboard().open()
    assert [j['id'] for j in board.data['pending_jobs']] == [job.id]

    assert board.review_job(job.id, publish=True)
    assert board.data['pending_jobs'] == []


def test_parent_board(make_job, make_profile):
    make_profile()
    job = make_job()
    board = ParentDashboard(PARENT_PHONE, PARENT_PASSWORD).open()
    assert board.data[0]['candidates'] == []

    OrderService.submit_application(job.id, STUDENT_PHONE)
    candidate = board.data[0]['candidates'][0]
    assert candidate['profile']['name'] == '李同学'

    assert board.review_candidate(candidate['id'], approve=True)
    assert board.data[0]['candidates'][0]['status'] == 'parent_approved'

    assert board.delete_job(job.id)
    # 最后一条需求删除后重新查询找不到记录
    assert board.error == "未找到记录，请检查手机号或密码是否正确"


def test_close_releases_subscriptions(make_job):
    board = AdminDashboard().open()
    assert change_feed.subscriber_count() == 2
    board.close()
    assert change_feed.subscriber_count() == 0


def test_student_payment_confirmation(make_job, make_profile):
    make_profile()
    job = make_job()
    board = StudentDashboard(STUDENT_PHONE).open()
    board.apply(job.id)
    order = board.order_for_job(job.id)
    OrderService.update_order_status(order['id'], OrderStatus.PARENT_APPROVED, Role.PARENT, PARENT_PHONE)
    assert board.order_for_job(job.id)['status'] == 'parent_approved'

    assert board.confirm_payment(order['id'])
    assert board.order_for_job(job.id)['status'] == 'payment_pending'
    assert 'contact_phone' not in board.order_for_job(job.id)['job']
