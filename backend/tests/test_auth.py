"""Test authentication endpoints."""
import json

from attendance_sync.services.auth_service import AuthService


def login(client, username='jane_doe', password='password123'):
    return client.post('/api/auth/login', json={'username': username, 'password': password})


def test_health_check(client):
    """Test auth health endpoint."""
    response = client.get('/api/auth/health')
    assert response.status_code == 200
    data = json.loads(response.data)
    assert data['message'] == 'Auth service is running'


def test_login_success(client, faculty):
    """Test successful login."""
    response = login(client)

    assert response.status_code == 200
    data = json.loads(response.data)
    assert data['success'] is True
    assert 'accessToken' in data['data']
    assert 'refreshToken' in data['data']
    assert data['data']['user']['username'] == 'jane_doe'
    assert 'password_hash' not in data['data']['user']


def test_login_invalid_credentials(client, faculty):
    """Test login with wrong password."""
    response = login(client, password='wrongpassword')

    assert response.status_code == 401
    data = json.loads(response.data)
    assert data['code'] == 'LOGIN_FAILED'


def test_login_validation(client):
    response = client.post('/api/auth/login', json={})
    assert response.status_code == 400

    response = login(client, username='bad name!')
    assert response.status_code == 400
    details = json.loads(response.data)['details']
    assert details[0]['field'] == 'username'


def test_login_inactive_account(client, faculty):
    faculty.update(is_active=False)

    response = login(client)

    assert response.status_code == 401
    assert json.loads(response.data)['error'] == 'Account is deactivated'


def test_profile(client, auth_headers):
    response = client.get('/api/auth/profile', headers=auth_headers)

    assert response.status_code == 200
    assert json.loads(response.data)['data']['user']['email'] == 'jane@school.edu'


def test_profile_requires_token(client):
    response = client.get('/api/auth/profile')

    assert response.status_code == 401
    assert json.loads(response.data)['code'] == 'TOKEN_MISSING'


def test_invalid_token(client):
    response = client.get('/api/auth/profile', headers={'Authorization': 'Bearer not.a.token'})

    assert response.status_code == 401
    assert json.loads(response.data)['code'] == 'TOKEN_INVALID'


def test_inactive_faculty_is_forbidden(client, faculty, auth_headers):
    faculty.update(is_active=False)

    response = client.get('/api/auth/profile', headers=auth_headers)

    assert response.status_code == 403
    assert json.loads(response.data)['code'] == 'USER_INACTIVE'


def test_refresh(client, faculty):
    tokens = json.loads(login(client).data)['data']

    response = client.post('/api/auth/refresh',
                           headers={'Authorization': f"Bearer {tokens['refreshToken']}"})

    assert response.status_code == 200
    assert 'accessToken' in json.loads(response.data)['data']


def test_refresh_rejects_access_token(client, auth_headers):
    response = client.post('/api/auth/refresh', headers=auth_headers)
    assert response.status_code == 401


def test_verify_and_logout(client, faculty, auth_headers):
    data = json.loads(client.post('/api/auth/verify', headers=auth_headers).data)
    assert data['data']['valid'] is True
    assert data['data']['user'] == {'userId': faculty.id, 'username': 'jane_doe'}

    response = client.post('/api/auth/logout', headers=auth_headers)
    assert json.loads(response.data)['message'] == 'Logged out successfully'


def test_create_faculty(app):
    faculty, error = AuthService.create_faculty(
        username='new_member', name='New Member', email='New@School.edu', password='secret123'
    )

    assert error is None
    assert faculty.email == 'new@school.edu'
    assert faculty.check_password('secret123')

    _, error = AuthService.create_faculty(
        username='new_member', name='Other', email='other@school.edu', password='secret123'
    )
    assert error == 'Username already exists'

    _, error = AuthService.create_faculty(
        username='short_pw', name='Other', email='x@school.edu', password='123'
    )
    assert error == 'Password must be at least 6 characters long'
