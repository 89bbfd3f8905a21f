"""Test authentication endpoints."""
import json

def test_health_check(client):
    """Test auth health endpoint."""
    response = client.get('/api/auth/health')
    assert response.status_code == 200
    data = json.loads(response.data)
    assert data['message'] == 'Auth service is running'

def test_app_health_check(client):
    response = client.get('/health')
    assert response.status_code == 200
    assert json.loads(response.data)['status'] == 'healthy'

def test_register_success(client):
    """Test successful student registration."""
    response = client.post('/api/auth/register',
        json={
            'email': 'newuser@example.com',
            'password': 'password123',
            'name': 'New User'
        })
    
    assert response.status_code == 201
    data = json.loads(response.data)
    assert data['error'] == False
    assert data['data']['email'] == 'newuser@example.com'
    assert data['data']['role'] == 'student'
    assert 'password_hash' not in data['data']

def test_register_ignores_requested_role(client):
    """Self-registration can never grant lecturer access."""
    response = client.post('/api/auth/register',
        json={
            'email': 'sneaky@example.com',
            'password': 'password123',
            'name': 'Sneaky User',
            'role': 'lecturer'
        })
    
    assert response.status_code == 201
    assert json.loads(response.data)['data']['role'] == 'student'

def test_register_validation(client, student):
    """Test registration validation."""
    # Missing fields
    response = client.post('/api/auth/register', json={})
    assert response.status_code == 400
    
    # Invalid email
    response = client.post('/api/auth/register',
        json={
            'email': 'invalid-email',
            'password': 'password123',
            'name': 'Test User'
        })
    assert response.status_code == 400
    
    # Duplicate email
    response = client.post('/api/auth/register',
        json={
            'email': 'student@university.edu',
            'password': 'password123',
            'name': 'Test User'
        })
    assert response.status_code == 400

def test_login_success(client, student):
    """Test successful login."""
    response = client.post('/api/auth/login',
        json={
            'email': 'student@university.edu',
            'password': 'password123'
        })
    
    assert response.status_code == 200
    data = json.loads(response.data)
    assert data['error'] == False
    assert 'access_token' in data['data']
    assert 'refresh_token' in data['data']
    assert data['data']['user']['id'] == student.id

def test_login_invalid_credentials(client, student):
    """Test login with invalid credentials."""
    response = client.post('/api/auth/login',
        json={
            'email': 'student@university.edu',
            'password': 'wrongpassword'
        })
    
    assert response.status_code == 401

def test_get_current_user(client, lecturer):
    """Test get current user profile."""
    # First login to get token
    login_response = client.post('/api/auth/login',
        json={
            'email': 'lecturer@university.edu',
            'password': 'password123'
        })
    
    token = json.loads(login_response.data)['data']['access_token']
    
    response = client.get('/api/auth/me',
        headers={'Authorization': f'Bearer {token}'})
    
    assert response.status_code == 200
    data = json.loads(response.data)
    assert data['data']['email'] == 'lecturer@university.edu'
    assert data['data']['role'] == 'lecturer'

def test_me_requires_token(client):
    response = client.get('/api/auth/me')
    assert response.status_code == 401
    assert json.loads(response.data)['message'] == 'Authorization token required'

def test_refresh_token(client, student):
    login_response = client.post('/api/auth/login',
        json={
            'email': 'student@university.edu',
            'password': 'password123'
        })
    refresh = json.loads(login_response.data)['data']['refresh_token']
    
    response = client.post('/api/auth/refresh',
        headers={'Authorization': f'Bearer {refresh}'})
    
    assert response.status_code == 200
    assert 'access_token' in json.loads(response.data)['data']

def test_swagger_spec(client):
    response = client.get('/api/swagger.json')
    assert response.status_code == 200
    assert '/attendance/checkin' in json.loads(response.data)['paths']
