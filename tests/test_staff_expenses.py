"""
Staff reimbursement claims
"""
from datetime import datetime
from decimal import Decimal

from tms.models import ExpenseStatus, StaffExpense


def add_claim(db_session, user, amount='100.00', paid=False, **overrides):
    values = {
        'amount': Decimal(amount),
        'expense_date': datetime(2024, 5, 20, 9, 0),
        'reason': 'Auto fare to customer site',
        'complaint_number': 'CMP-1001',
        'status': ExpenseStatus.PAID if paid else ExpenseStatus.PENDING,
        'is_paid_by_company': paid,
        'paid_date': datetime(2024, 5, 25, 12, 0) if paid else None,
        'staff_user_id': user.id,
    }
    values.update(overrides)
    claim = StaffExpense(**values)
    db_session.add(claim)
    db_session.commit()
    db_session.refresh(claim)
    return claim


class TestCreateClaim:
    def test_staff_submits_claim(self, client, staff_user, staff_headers):
        payload = {'amount': 85.5, 'expense_date': '2024-05-20T14:45:10.123Z', 'reason': 'Lunch on field visit',
                   'complaint_number': 'CMP-2001'}

        response = client.post('/staff-expenses', json=payload, headers=staff_headers)

        assert response.status_code == 201
        body = response.json()
        assert body['amount'] == 85.5
        assert body['expense_date'] == '2024-05-20T14:45:10'
        assert body['status'] == 'PENDING'
        assert body['is_paid_by_company'] is False
        assert body['staff_user_id'] == staff_user.id

    def test_date_only_becomes_midnight(self, client, staff_headers):
        response = client.post('/staff-expenses', json={'amount': 20, 'expense_date': '2024-05-21',
                                                        'reason': 'Parking'}, headers=staff_headers)

        assert response.json()['expense_date'] == '2024-05-21T00:00:00'

    def test_blank_date_means_now(self, client, staff_headers):
        before = datetime.now().replace(microsecond=0)

        response = client.post('/staff-expenses', json={'amount': 20, 'expense_date': '', 'reason': 'Parking'},
                               headers=staff_headers)

        assert datetime.fromisoformat(response.json()['expense_date']) >= before

    def test_bad_date(self, client, staff_headers):
        response = client.post('/staff-expenses', json={'amount': 20, 'expense_date': 'not a date',
                                                        'reason': 'Parking'}, headers=staff_headers)

        assert response.status_code == 400

    def test_invalid_status(self, client, admin_headers):
        response = client.post('/staff-expenses', json={'amount': 20, 'reason': 'Parking', 'status': 'cleared'},
                               headers=admin_headers)

        assert response.status_code == 400
        assert response.json()['detail'] == 'Invalid status: cleared'

    def test_staff_cannot_preset_status(self, client, staff_headers):
        response = client.post('/staff-expenses', json={'amount': 20, 'reason': 'Parking', 'status': 'approved'},
                               headers=staff_headers)

        assert response.status_code == 403

    def test_admin_creates_paid_claim(self, client, admin_headers):
        response = client.post('/staff-expenses', json={'amount': 20, 'reason': 'Parking', 'status': 'paid'},
                               headers=admin_headers)

        body = response.json()
        assert body['status'] == 'PAID'
        assert body['is_paid_by_company'] is True
        assert body['paid_date'] is not None

    def test_amount_must_be_positive(self, client, staff_headers):
        response = client.post('/staff-expenses', json={'amount': 0, 'reason': 'Parking'}, headers=staff_headers)

        assert response.status_code == 422


class TestEditClaim:
    def test_owner_edits_unpaid_claim(self, client, db_session, staff_user, staff_headers):
        claim = add_claim(db_session, staff_user)

        response = client.put(f'/staff-expenses/{claim.id}',
                              json={'amount': 150, 'reason': 'Train ticket', 'expense_date': '',
                                    'complaint_number': 'CMP-1002', 'status': 'PAID'},
                              headers=staff_headers)

        assert response.status_code == 200
        body = response.json()
        assert body['amount'] == 150.0
        assert body['reason'] == 'Train ticket'
        assert body['expense_date'] == '2024-05-20T09:00:00'
        assert body['status'] == 'PENDING'

    def test_paid_claim_is_frozen(self, client, db_session, staff_user, staff_headers):
        claim = add_claim(db_session, staff_user, paid=True)

        edit = client.put(f'/staff-expenses/{claim.id}', json={'amount': 1, 'reason': 'x'}, headers=staff_headers)
        delete = client.delete(f'/staff-expenses/{claim.id}', headers=staff_headers)

        assert edit.status_code == 400
        assert edit.json()['detail'] == 'Cannot edit expense that has already been paid by company'
        assert delete.status_code == 400
        assert delete.json()['detail'] == 'Cannot delete expense that has already been paid by company'

    def test_other_staff_cannot_touch_claim(self, client, db_session, staff_user, other_staff_headers):
        claim = add_claim(db_session, staff_user)

        assert client.get(f'/staff-expenses/{claim.id}', headers=other_staff_headers).status_code == 403
        assert client.delete(f'/staff-expenses/{claim.id}', headers=other_staff_headers).status_code == 403

    def test_owner_deletes_unpaid_claim(self, client, db_session, staff_user, staff_headers):
        claim = add_claim(db_session, staff_user)

        assert client.delete(f'/staff-expenses/{claim.id}', headers=staff_headers).status_code == 200
        assert client.get(f'/staff-expenses/{claim.id}', headers=staff_headers).status_code == 404


class TestPayment:
    def test_mark_paid_is_idempotent(self, client, db_session, staff_user, admin_headers):
        claim = add_claim(db_session, staff_user)

        first = client.put(f'/staff-expenses/{claim.id}/mark-paid', headers=admin_headers).json()
        second = client.put(f'/staff-expenses/{claim.id}/mark-paid', headers=admin_headers).json()

        assert first['is_paid_by_company'] is True
        assert first['status'] == 'PAID'
        assert second['paid_date'] == first['paid_date']

    def test_staff_cannot_mark_paid(self, client, db_session, staff_user, staff_headers):
        claim = add_claim(db_session, staff_user)

        assert client.put(f'/staff-expenses/{claim.id}/mark-paid', headers=staff_headers).status_code == 403

    def test_status_change(self, client, db_session, staff_user, admin_headers):
        claim = add_claim(db_session, staff_user)

        approved = client.put(f'/staff-expenses/{claim.id}/status', params={'status': 'approved'},
                              headers=admin_headers).json()
        assert approved['status'] == 'APPROVED'
        assert approved['is_paid_by_company'] is False

        paid = client.put(f'/staff-expenses/{claim.id}/status', params={'status': 'PAID'},
                          headers=admin_headers).json()
        assert paid['is_paid_by_company'] is True
        assert paid['paid_date'] is not None

    def test_paid_status_is_locked(self, client, db_session, staff_user, admin_headers):
        claim = add_claim(db_session, staff_user, paid=True)

        response = client.put(f'/staff-expenses/{claim.id}/status', params={'status': 'REJECTED'},
                              headers=admin_headers)

        assert response.status_code == 400

    def test_invalid_status_change(self, client, db_session, staff_user, admin_headers):
        claim = add_claim(db_session, staff_user)

        response = client.put(f'/staff-expenses/{claim.id}/status', params={'status': 'CLEARED'},
                              headers=admin_headers)

        assert response.status_code == 400
        assert response.json()['detail'] == 'Invalid status: CLEARED'

    def test_missing_claim(self, client, admin_headers):
        assert client.put('/staff-expenses/999/mark-paid', headers=admin_headers).status_code == 404


class TestClaimQueries:
    def test_my_lists_and_stats(self, client, db_session, staff_user, other_staff, staff_headers):
        unpaid_old = add_claim(db_session, staff_user, amount='40.00', created_at=datetime(2024, 5, 1))
        unpaid_new = add_claim(db_session, staff_user, amount='60.00', created_at=datetime(2024, 5, 10))
        paid = add_claim(db_session, staff_user, amount='100.00', paid=True)
        add_claim(db_session, other_staff, amount='999.00')

        mine = client.get('/staff-expenses/my-expenses', headers=staff_headers).json()
        unpaid = client.get('/staff-expenses/my-expenses/unpaid', headers=staff_headers).json()
        paid_list = client.get('/staff-expenses/my-expenses/paid', headers=staff_headers).json()
        stats = client.get('/staff-expenses/my-expenses/stats', headers=staff_headers).json()

        assert len(mine) == 3
        assert [c['id'] for c in unpaid] == [unpaid_new.id, unpaid_old.id]
        assert [c['id'] for c in paid_list] == [paid.id]
        assert stats == {
            'total_amount': 200.0,
            'total_unpaid_amount': 100.0,
            'total_paid_amount': 100.0,
            'unpaid_count': 2,
            'paid_count': 1,
            'total_count': 3,
        }

    def test_stats_with_no_claims(self, client, staff_headers):
        stats = client.get('/staff-expenses/my-expenses/stats', headers=staff_headers).json()

        assert stats['total_amount'] == 0
        assert stats['total_count'] == 0

    def test_admin_views(self, client, db_session, staff_user, other_staff, admin_headers, staff_headers):
        mine = add_claim(db_session, staff_user)
        theirs = add_claim(db_session, other_staff)
        add_claim(db_session, other_staff, paid=True)

        unpaid_ids = {c['id'] for c in client.get('/staff-expenses/unpaid', headers=admin_headers).json()}
        assert unpaid_ids == {mine.id, theirs.id}
        by_user = client.get(f'/staff-expenses/user/{staff_user.id}', headers=admin_headers).json()
        assert [c['id'] for c in by_user] == [mine.id]
        user_stats = client.get(f'/staff-expenses/user/{other_staff.id}/stats', headers=admin_headers).json()
        assert user_stats['paid_count'] == 1 and user_stats['unpaid_count'] == 1
        assert client.get('/staff-expenses/unpaid', headers=staff_headers).status_code == 403
        assert client.get('/staff-expenses/user/9999', headers=admin_headers).status_code == 404

    def test_search_scoped_to_caller(self, client, db_session, staff_user, other_staff, staff_headers, admin_headers):
        mine = add_claim(db_session, staff_user, complaint_number='CMP-7788')
        theirs = add_claim(db_session, other_staff, complaint_number='cmp-7788-b')

        as_staff = client.get('/staff-expenses/search', params={'complaint_number': '7788'},
                              headers=staff_headers).json()
        as_admin = client.get('/staff-expenses/search', params={'complaint_number': 'CMP-7788'},
                              headers=admin_headers).json()

        assert [c['id'] for c in as_staff] == [mine.id]
        assert {c['id'] for c in as_admin} == {mine.id, theirs.id}

    def test_search_treats_wildcards_literally(self, client, db_session, staff_user, staff_headers):
        add_claim(db_session, staff_user, complaint_number='CMP-1001')
        add_claim(db_session, staff_user, complaint_number='CMPX1001')

        underscore = client.get('/staff-expenses/search', params={'complaint_number': 'CMP_1001'},
                                headers=staff_headers).json()
        percent = client.get('/staff-expenses/search', params={'complaint_number': '%'},
                             headers=staff_headers).json()

        assert underscore == []
        assert percent == []

    def test_date_range_scoped_to_caller(self, client, db_session, staff_user, other_staff, staff_headers):
        inside = add_claim(db_session, staff_user, expense_date=datetime(2024, 5, 15, 8, 0))
        add_claim(db_session, staff_user, expense_date=datetime(2024, 6, 15, 8, 0))
        add_claim(db_session, other_staff, expense_date=datetime(2024, 5, 15, 8, 0))

        response = client.get('/staff-expenses/date-range',
                              params={'start_date': '2024-05-01', 'end_date': '2024-05-31T23:59:59'},
                              headers=staff_headers)

        assert [c['id'] for c in response.json()] == [inside.id]

    def test_date_range_bad_input(self, client, staff_headers):
        response = client.get('/staff-expenses/date-range', params={'start_date': 'soon', 'end_date': 'later'},
                              headers=staff_headers)

        assert response.status_code == 400
