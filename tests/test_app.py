"""
Health/info endpoints, response headers, default admin seeding and date parsing
"""
import hashlib
from datetime import date, datetime

import pytest
from fastapi import HTTPException

from conftest import make_user
from tms.config import settings
from tms.models import Role, User
from tms.utils.admin_seed import seed_default_admin
from tms.utils.date_utils import current_week_bounds, parse_datetime_param, parse_lenient_datetime


class TestHealth:
    def test_health(self, client):
        body = client.get('/api/health').json()

        assert body['status'] == 'UP'
        assert body['application'] == 'Aarohi Task Management System'
        assert body['version'] == '1.0.0'
        assert body['timestamp']

    def test_info(self, client):
        body = client.get('/api/info').json()

        assert body['description'] == 'Task Management System for Aarohi Sewing Enterprises'

    def test_openapi_document(self, client):
        schema = client.get('/openapi.json').json()

        assert schema['info']['title'] == 'Aarohi Task Management System API'
        assert '/complaints/public' in schema['paths']


class TestResponseHeaders:
    def test_no_cache_headers_and_etag(self, client, admin_headers):
        response = client.get('/users', headers=admin_headers)

        assert response.headers['Cache-Control'] == 'no-cache, no-store, must-revalidate'
        assert response.headers['Pragma'] == 'no-cache'
        assert response.headers['Expires'] == '0'
        assert response.headers['ETag'] == '"0' + hashlib.md5(response.content, usedforsecurity=False).hexdigest() + '"'

    def test_matching_etag_returns_not_modified(self, client, admin_headers):
        etag = client.get('/users', headers=admin_headers).headers['ETag']

        response = client.get('/users', headers={**admin_headers, 'If-None-Match': etag})

        assert response.status_code == 304

    def test_health_is_not_tagged(self, client):
        assert 'ETag' not in client.get('/api/health').headers


class TestAdminSeed:
    def test_creates_default_admin_once(self, db_session):
        assert seed_default_admin(db_session) is True
        assert seed_default_admin(db_session) is False

        admin = db_session.query(User).filter(User.username == settings.default_admin_username).one()
        assert admin.role == Role.ADMIN
        assert admin.email == settings.default_admin_email
        assert admin.mobile_number == settings.default_admin_mobile

    def test_seeded_admin_can_sign_in(self, client, db_session):
        seed_default_admin(db_session)

        response = client.post('/auth/signin', json={
            'username': settings.default_admin_username,
            'password': settings.default_admin_password,
            'role': 'ADMIN',
        })

        assert response.status_code == 200

    def test_skips_when_mobile_taken(self, db_session):
        make_user(db_session, mobile_number=settings.default_admin_mobile)

        assert seed_default_admin(db_session) is False


class TestDateParsing:
    @pytest.mark.parametrize('raw, expected', [
        ('2024-05-20T14:45:10.123Z', datetime(2024, 5, 20, 14, 45, 10)),
        ('2024-05-20T14:45:10', datetime(2024, 5, 20, 14, 45, 10)),
        ('2024-05-20', datetime(2024, 5, 20)),
        ('2024-05-20 14:45', datetime(2024, 5, 20, 14, 45)),
    ])
    def test_lenient_formats(self, raw, expected):
        assert parse_lenient_datetime(raw) == expected

    def test_blank_is_none(self):
        assert parse_lenient_datetime('  ') is None
        assert parse_lenient_datetime(None) is None

    def test_bad_query_parameter_is_400(self):
        with pytest.raises(HTTPException) as exc:
            parse_datetime_param('not a date', 'start_date')

        assert exc.value.status_code == 400

    def test_week_starts_on_monday(self):
        start, end = current_week_bounds(date(2024, 6, 6))

        assert start == datetime(2024, 6, 3, 0, 0, 0)
        assert end == datetime(2024, 6, 9, 23, 59, 59)
