"""
Sign-in, sign-up and token handling
"""
from datetime import datetime, timedelta

from jose import jwt

from conftest import TEST_PASSWORD, fake, headers_for, make_user
from tms.auth_utils import create_access_token
from tms.config import settings
from tms.models import Role


def signin(client, username, password=TEST_PASSWORD, role='STAFF'):
    return client.post('/auth/signin', json={'username': username, 'password': password, 'role': role})


class TestSignin:
    def test_signin_returns_token_and_profile(self, client, staff_user):
        response = signin(client, staff_user.username)

        assert response.status_code == 200
        body = response.json()
        assert body['token_type'] == 'Bearer'
        assert body['id'] == staff_user.id
        assert body['username'] == staff_user.username
        assert body['email'] == staff_user.email
        assert body['full_name'] == staff_user.full_name
        assert body['role'] == 'STAFF'

        claims = jwt.decode(body['access_token'], settings.secret_key, algorithms=[settings.algorithm])
        assert claims['sub'] == staff_user.username
        assert claims['uid'] == staff_user.id
        assert claims['role'] == 'STAFF'

    def test_token_from_signin_authenticates(self, client, admin_user):
        token = signin(client, admin_user.username, role='ADMIN').json()['access_token']

        response = client.get('/auth/me', headers={'Authorization': f'Bearer {token}'})

        assert response.status_code == 200
        assert response.json()['username'] == admin_user.username

    def test_unknown_user(self, client):
        response = signin(client, 'nobody-here')

        assert response.status_code == 400
        assert response.json()['detail'] == 'Error: User not found!'

    def test_role_mismatch(self, client, staff_user):
        response = signin(client, staff_user.username, role='ADMIN')

        assert response.status_code == 400
        assert response.json()['detail'] == 'Error: Invalid role selected for this user!'

    def test_wrong_password(self, client, staff_user):
        response = signin(client, staff_user.username, password='not-the-password')

        assert response.status_code == 401

    def test_deactivated_user_cannot_sign_in(self, client, db_session):
        user = make_user(db_session, role=Role.STAFF, is_active=False)

        response = signin(client, user.username)

        assert response.status_code == 403

    def test_invalid_role_value_is_rejected(self, client, staff_user):
        response = signin(client, staff_user.username, role='MANAGER')

        assert response.status_code == 422


class TestSignup:
    def signup_payload(self, **overrides):
        payload = {
            'username': f'newstaff{fake.random_int(1000, 9999)}',
            'email': fake.unique.email(),
            'full_name': fake.name(),
            'mobile_number': fake.unique.numerify('6#########'),
            'password': 'secret123',
        }
        payload.update(overrides)
        return payload

    def test_signup_defaults_role_to_staff(self, client, admin_headers):
        payload = self.signup_payload()

        response = client.post('/auth/signup', json=payload, headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {'message': 'User registered successfully!'}
        new_user_token = signin(client, payload['username'], password='secret123', role='STAFF')
        assert new_user_token.status_code == 200

    def test_signup_with_admin_role(self, client, admin_headers):
        payload = self.signup_payload(role='admin')

        assert client.post('/auth/signup', json=payload, headers=admin_headers).status_code == 200
        assert signin(client, payload['username'], password='secret123', role='ADMIN').status_code == 200

    def test_duplicate_username(self, client, admin_headers, staff_user):
        payload = self.signup_payload(username=staff_user.username)

        response = client.post('/auth/signup', json=payload, headers=admin_headers)

        assert response.status_code == 400
        assert response.json()['detail'] == 'Error: Username is already taken!'

    def test_duplicate_email(self, client, admin_headers, staff_user):
        payload = self.signup_payload(email=staff_user.email)

        response = client.post('/auth/signup', json=payload, headers=admin_headers)

        assert response.status_code == 400
        assert response.json()['detail'] == 'Error: Email is already in use!'

    def test_duplicate_mobile(self, client, admin_headers, staff_user):
        payload = self.signup_payload(mobile_number=staff_user.mobile_number)

        response = client.post('/auth/signup', json=payload, headers=admin_headers)

        assert response.status_code == 400
        assert response.json()['detail'] == 'Error: Mobile number is already in use!'

    def test_short_password_is_rejected(self, client, admin_headers):
        response = client.post('/auth/signup', json=self.signup_payload(password='123'), headers=admin_headers)

        assert response.status_code == 422

    def test_staff_cannot_register_users(self, client, staff_headers):
        response = client.post('/auth/signup', json=self.signup_payload(), headers=staff_headers)

        assert response.status_code == 403


class TestTokens:
    def test_missing_token(self, client):
        assert client.get('/auth/me').status_code == 401

    def test_garbage_token(self, client):
        response = client.get('/auth/me', headers={'Authorization': 'Bearer not-a-jwt'})

        assert response.status_code == 401

    def test_expired_token(self, client, staff_user):
        token = create_access_token({'sub': staff_user.username}, expires_minutes=-5)

        response = client.get('/auth/me', headers={'Authorization': f'Bearer {token}'})

        assert response.status_code == 401

    def test_token_signed_with_other_key(self, client, staff_user):
        token = jwt.encode(
            {'sub': staff_user.username, 'exp': datetime.utcnow() + timedelta(minutes=5)},
            'some-other-secret',
            algorithm='HS256',
        )

        response = client.get('/auth/me', headers={'Authorization': f'Bearer {token}'})

        assert response.status_code == 401

    def test_token_of_deactivated_user(self, client, db_session):
        user = make_user(db_session, is_active=False)

        response = client.get('/auth/me', headers=headers_for(user))

        assert response.status_code == 401

    def test_public_test_endpoint(self, client):
        response = client.get('/auth/test')

        assert response.status_code == 200
        assert response.json() == {'message': 'Authentication test successful!'}
