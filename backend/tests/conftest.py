"""Shared fixtures: app, client, users and a bound session."""
from datetime import timedelta

import pytest
from flask_jwt_extended import create_access_token

from geocheckin import create_app, db
from geocheckin.models import AttendanceSession, Location, SessionStatus, WindowStrategy, utcnow
from geocheckin.services.auth_service import AuthService

LAGOS = (6.5244, 3.3792)

@pytest.fixture
def app():
    """Create test app."""
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()

@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()

def _headers(user):
    return {'Authorization': f'Bearer {create_access_token(identity=user.id)}'}

@pytest.fixture
def lecturer(app):
    return AuthService.create_user('lecturer@university.edu', 'password123', 'Dr. Ada Obi', 'lecturer')

@pytest.fixture
def other_lecturer(app):
    return AuthService.create_user('other@university.edu', 'password123', 'Dr. Tunde Bello', 'lecturer')

@pytest.fixture
def student(app):
    return AuthService.create_user('student@university.edu', 'password123', 'Chidi Okeke', 'student')

@pytest.fixture
def second_student(app):
    return AuthService.create_user('student2@university.edu', 'password123', 'Amaka Eze', 'student')

@pytest.fixture
def lecturer_headers(lecturer):
    return _headers(lecturer)

@pytest.fixture
def other_lecturer_headers(other_lecturer):
    return _headers(other_lecturer)

@pytest.fixture
def student_headers(student):
    return _headers(student)

@pytest.fixture
def second_student_headers(second_student):
    return _headers(second_student)

@pytest.fixture
def location(lecturer):
    """Lecture hall in Lagos with a 50m radius."""
    return Location(
        owner_id=lecturer.id,
        name='Lecture Theatre 1',
        latitude=LAGOS[0],
        longitude=LAGOS[1],
        radius=50
    ).save()

@pytest.fixture
def make_session(lecturer, location):
    """Factory for sessions with an explicit window."""
    def _make(starts_at=None, expires_at=None, location_id='default', course_code='CSC301'):
        starts_at = starts_at or utcnow() - timedelta(minutes=1)
        expires_at = expires_at or starts_at + timedelta(minutes=15)
        return AttendanceSession(
            owner_id=lecturer.id,
            course_code=course_code,
            location_id=location.id if location_id == 'default' else location_id,
            starts_at=starts_at,
            expires_at=expires_at,
            window_strategy=WindowStrategy.FIXED,
            status=SessionStatus.ACTIVE
        ).save()
    return _make

@pytest.fixture
def open_session(make_session):
    return make_session()
