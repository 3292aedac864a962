import pytest
from sqlalchemy.exc import OperationalError

from tutormatch.core.errors import (
    BusinessRuleError, InvalidTransition, NotFound, PermissionDenied, StoreWriteError,
)
from tutormatch.core.workflow.job_status import JobStatus
from tutormatch.core.workflow.order_status import OrderStatus, Role
from tutormatch.extensions import db
from tutormatch.models.job import Job
from tutormatch.models.order import Order
from tutormatch.services.job.job_service import JobService
from tutormatch.services.order import order_service
from tutormatch.services.order.order_service import OrderService
from tutormatch.services.student.profile_service import ProfileService

from tests.conftest import OTHER_STUDENT_PHONE, PARENT_PASSWORD, PARENT_PHONE, STUDENT_PHONE


def _approved_and_paid(job, phone=STUDENT_PHONE):
    order = OrderService.submit_application(job.id, phone)
    OrderService.update_order_status(order.id, OrderStatus.PARENT_APPROVED, Role.PARENT, PARENT_PHONE)
    OrderService.confirm_student_payment(order.id, phone)
    return order


class TestJobs:
    def test_new_job_is_pending_and_hidden(self, make_job):
        job = make_job(status=JobStatus.PENDING)
        assert job.status == 'pending'
        assert job.is_active is False
        assert JobService.list_published_jobs() == []
        assert [j.id for j in JobService.list_pending_jobs()] == [job.id]

    def test_publish_syncs_is_active(self, make_job):
        job = make_job()
        assert job.status == 'published'
        assert job.is_active is True

    def test_invalid_phone_rejected(self, make_job):
        with pytest.raises(BusinessRuleError):
            make_job(contact_phone='12345')

    def test_marketplace_newest_first_excluding_applied(self, make_job, make_profile):
        make_profile()
        older = make_job(title='旧需求')
        newer = make_job(title='新需求')
        assert [j.id for j in JobService.list_published_jobs()] == [newer.id, older.id]

        OrderService.submit_application(older.id, STUDENT_PHONE)
        assert [j.id for j in JobService.list_published_jobs(exclude_phone=STUDENT_PHONE)] == [newer.id]

    def test_parent_sees_own_jobs_only_with_password(self, make_job):
        make_job()
        make_job(contact_phone='13800009999')
        assert len(JobService.list_jobs_for_parent(PARENT_PHONE, PARENT_PASSWORD)) == 1
        with pytest.raises(PermissionDenied):
            JobService.list_jobs_for_parent(PARENT_PHONE, 'wrong')

    def test_rejected_job_cannot_be_relisted(self, make_job):
        job = make_job(status=JobStatus.REJECTED)
        with pytest.raises(InvalidTransition):
            JobService.relist_job(job.id)

    def test_delete_cascades_orders(self, make_job, make_profile):
        make_profile()
        make_profile(OTHER_STUDENT_PHONE)
        job = make_job()
        OrderService.submit_application(job.id, STUDENT_PHONE)
        OrderService.submit_application(job.id, OTHER_STUDENT_PHONE)

        assert JobService.delete_job(job.id, Role.PARENT, PARENT_PHONE) == 2
        assert db.session.get(Job, job.id) is None
        assert Order.query.count() == 0

    def test_parent_cannot_delete_someone_elses_job(self, make_job):
        job = make_job()
        with pytest.raises(PermissionDenied):
            JobService.delete_job(job.id, Role.PARENT, '13800009999')
        with pytest.raises(PermissionDenied):
            JobService.delete_job(job.id, Role.STUDENT, STUDENT_PHONE)


class TestApplications:
    def test_requires_profile(self, make_job):
        job = make_job()
        with pytest.raises(BusinessRuleError):
            OrderService.submit_application(job.id, STUDENT_PHONE)

    def test_requires_published_job(self, make_job, make_profile):
        make_profile()
        job = make_job(status=JobStatus.PENDING)
        with pytest.raises(BusinessRuleError):
            OrderService.submit_application(job.id, STUDENT_PHONE)

    def test_unknown_job(self, make_profile):
        make_profile()
        with pytest.raises(NotFound):
            OrderService.submit_application(999, STUDENT_PHONE)

    def test_duplicate_application_refused(self, make_job, make_profile):
        make_profile()
        job = make_job()
        OrderService.submit_application(job.id, STUDENT_PHONE)
        with pytest.raises(BusinessRuleError):
            OrderService.submit_application(job.id, STUDENT_PHONE)
        assert Order.query.count() == 1

    def test_reapply_after_rejection(self, make_job, make_profile):
        make_profile()
        job = make_job()
        first = OrderService.submit_application(job.id, STUDENT_PHONE)
        OrderService.update_order_status(first.id, OrderStatus.REJECTED, Role.PARENT, PARENT_PHONE)

        second = OrderService.submit_application(job.id, STUDENT_PHONE)
        assert second.id != first.id
        statuses = sorted(o.status for o in Order.query.all())
        assert statuses == ['applying', 'rejected']

    def test_sex_requirement_mismatch(self, make_job, make_profile):
        make_profile(gender='female')
        job = make_job(sex_requirement='male')
        with pytest.raises(BusinessRuleError):
            OrderService.submit_application(job.id, STUDENT_PHONE)
        assert Order.query.count() == 0

    def test_in_flight_duplicate_refused(self, make_job, make_profile):
        make_profile()
        job = make_job()
        order_service._inflight.add((job.id, STUDENT_PHONE))
        try:
            with pytest.raises(BusinessRuleError):
                OrderService.submit_application(job.id, STUDENT_PHONE)
        finally:
            order_service._inflight.discard((job.id, STUDENT_PHONE))
        assert Order.query.count() == 0


class TestOrderFlow:
    def test_parent_cannot_touch_other_parents_orders(self, make_job, make_profile):
        make_profile()
        job = make_job()
        order = OrderService.submit_application(job.id, STUDENT_PHONE)
        with pytest.raises(PermissionDenied):
            OrderService.update_order_status(order.id, OrderStatus.PARENT_APPROVED, Role.PARENT, '13800009999')

    def test_student_cannot_pay_before_parent_approval(self, make_job, make_profile):
        make_profile()
        job = make_job()
        order = OrderService.submit_application(job.id, STUDENT_PHONE)
        with pytest.raises(InvalidTransition):
            OrderService.confirm_student_payment(order.id, STUDENT_PHONE)

    def test_final_approval_only_through_confirm_payment(self, make_job, make_profile):
        make_profile()
        job = make_job()
        order = _approved_and_paid(job)
        with pytest.raises(PermissionDenied):
            OrderService.update_order_status(order.id, OrderStatus.FINAL_APPROVED, Role.STUDENT, STUDENT_PHONE)

        OrderService.update_order_status(order.id, 'final_approved', Role.ADMIN)
        assert db.session.get(Job, job.id).status == 'taken'

    def test_confirm_payment_takes_job_down(self, make_job, make_profile):
        make_profile()
        job = make_job()
        order = _approved_and_paid(job)

        OrderService.confirm_payment(order.id)
        job = db.session.get(Job, job.id)
        assert job.status == 'taken'
        assert job.is_active is False
        assert db.session.get(Order, order.id).status == 'final_approved'
        assert JobService.list_published_jobs() == []

    def test_second_paid_order_on_taken_job_can_be_confirmed(self, make_job, make_profile):
        make_profile()
        make_profile(OTHER_STUDENT_PHONE)
        job = make_job()
        first = _approved_and_paid(job)
        second = _approved_and_paid(job, OTHER_STUDENT_PHONE)

        OrderService.confirm_payment(first.id)
        OrderService.confirm_payment(second.id)

        assert db.session.get(Order, second.id).status == 'final_approved'
        job = db.session.get(Job, job.id)
        assert job.status == 'taken'
        assert job.is_active is False

    def test_confirm_payment_is_atomic(self, make_job, make_profile, monkeypatch):
        make_profile()
        job = make_job()
        order = _approved_and_paid(job)

        def failing_commit():
            raise OperationalError('COMMIT', {}, Exception('disk I/O error'))

        monkeypatch.setattr(db.session, 'commit', failing_commit)
        with pytest.raises(StoreWriteError) as exc:
            OrderService.confirm_payment(order.id)
        monkeypatch.undo()

        assert 'disk I/O error' in exc.value.message
        db.session.expire_all()
        assert db.session.get(Order, order.id).status == 'payment_pending'
        job = db.session.get(Job, job.id)
        assert job.status == 'published'
        assert job.is_active is True

    def test_relist_keeps_old_orders(self, make_job, make_profile):
        make_profile()
        job = make_job()
        order = _approved_and_paid(job)
        OrderService.confirm_payment(order.id)

        JobService.relist_job(job.id)
        assert db.session.get(Job, job.id).status == 'published'
        assert db.session.get(Order, order.id).status == 'final_approved'

    def test_payment_requires_pending_status(self, make_job, make_profile):
        make_profile()
        job = make_job()
        order = OrderService.submit_application(job.id, STUDENT_PHONE)
        with pytest.raises(InvalidTransition):
            OrderService.confirm_payment(order.id)
        assert db.session.get(Job, job.id).status == 'published'


class TestListings:
    def test_student_sees_contact_only_after_final_approval(self, make_job, make_profile):
        make_profile()
        job = make_job()
        order = _approved_and_paid(job)

        mine = OrderService.list_orders_for_student(STUDENT_PHONE)
        assert 'contact_phone' not in mine[0]['job']
        assert mine[0]['fee'] == {'hours': 4, 'amount': 400.0, 'note': '初二 - 每周2次'}
        assert mine[0]['is_recommended'] is True

        OrderService.confirm_payment(order.id)
        mine = OrderService.list_orders_for_student(STUDENT_PHONE)
        assert mine[0]['job']['contact_phone'] == PARENT_PHONE
        assert mine[0]['job_taken'] is True

    def test_admin_listing_merges_profiles(self, make_job, make_profile):
        make_profile()
        job = make_job()
        OrderService.submit_application(job.id, STUDENT_PHONE)
        # 简历缺失的订单保留，profile 为 None
        db.session.add(Order(job_id=job.id, student_contact=OTHER_STUDENT_PHONE, status='applying'))
        db.session.commit()

        rows = OrderService.list_orders_for_admin()
        by_phone = {r['student_contact']: r for r in rows}
        assert by_phone[STUDENT_PHONE]['profile']['name'] == '李同学'
        assert by_phone[OTHER_STUDENT_PHONE]['profile'] is None
        assert by_phone[STUDENT_PHONE]['job']['contact_phone'] == PARENT_PHONE

    def test_admin_listing_filters_by_status(self, make_job, make_profile):
        make_profile()
        job = make_job()
        order = OrderService.submit_application(job.id, STUDENT_PHONE)
        OrderService.update_order_status(order.id, OrderStatus.REJECTED, Role.ADMIN)

        assert OrderService.list_orders_for_admin() == []
        rejected = OrderService.list_orders_for_admin([OrderStatus.REJECTED])
        assert [r['id'] for r in rejected] == [order.id]

    def test_applications_grouped_by_job(self, make_job, make_profile):
        make_profile()
        make_profile(OTHER_STUDENT_PHONE)
        job_a = make_job(title='A')
        job_b = make_job(title='B')
        OrderService.submit_application(job_a.id, STUDENT_PHONE)
        OrderService.submit_application(job_a.id, OTHER_STUDENT_PHONE)
        OrderService.submit_application(job_b.id, STUDENT_PHONE)

        groups = OrderService.list_applications_for_admin()
        sizes = {g['job']['title']: len(g['orders']) for g in groups}
        assert sizes == {'A': 2, 'B': 1}

    def test_parent_candidates(self, make_job, make_profile):
        make_profile()
        job = make_job()
        OrderService.submit_application(job.id, STUDENT_PHONE)

        jobs = OrderService.list_jobs_with_candidates(PARENT_PHONE, PARENT_PASSWORD)
        assert jobs[0]['candidates'][0]['profile']['school'] == '北京大学'
        assert OrderService.list_jobs_with_candidates(PARENT_PHONE) == jobs

    def test_migrate_legacy_orders(self, make_job):
        job = make_job()
        db.session.add_all([
            Order(job_id=job.id, student_contact=STUDENT_PHONE, status='pending'),
            Order(job_id=job.id, student_contact=OTHER_STUDENT_PHONE, status='approved'),
        ])
        db.session.commit()

        assert OrderService.migrate_legacy_orders() == 2
        db.session.expire_all()
        assert sorted(o.status for o in Order.query.all()) == ['applying', 'final_approved']
        assert OrderService.migrate_legacy_orders() == 0


class TestProfiles:
    def test_upsert_updates_in_place(self, make_profile):
        make_profile()
        profile, created = ProfileService.upsert_profile(STUDENT_PHONE, {'name': '李同学', 'school': '清华大学'})
        assert created is False
        assert profile.school == '清华大学'
        assert profile.major == '数学'

    def test_password_protects_updates(self, make_profile):
        make_profile(password='secret')
        with pytest.raises(PermissionDenied):
            ProfileService.upsert_profile(STUDENT_PHONE, {'name': 'x', 'school': 'y'})
        ProfileService.upsert_profile(STUDENT_PHONE, {'name': 'x', 'school': 'y'}, 'secret')

    def test_required_fields(self):
        with pytest.raises(BusinessRuleError) as exc:
            ProfileService.upsert_profile(STUDENT_PHONE, {'name': '李同学'})
        assert exc.value.details == {'missing': ['school']}

    def test_authenticate(self, make_profile):
        make_profile(password='secret')
        assert ProfileService.authenticate(STUDENT_PHONE, 'secret').phone == STUDENT_PHONE
        with pytest.raises(PermissionDenied):
            ProfileService.authenticate(STUDENT_PHONE, 'nope')
        with pytest.raises(NotFound):
            ProfileService.authenticate(OTHER_STUDENT_PHONE)
