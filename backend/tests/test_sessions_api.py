"""Session lifecycle, rules and per-session attendance."""
from datetime import datetime, timedelta

from geocheckin.models import AttendanceRules, utcnow

SESSIONS_URL = '/api/sessions/'
CHECKIN_URL = '/api/attendance/checkin'
LAGOS = (6.5244, 3.3792)

def _iso(value):
    return value.isoformat() + 'Z'

def _create(client, headers, **fields):
    return client.post(SESSIONS_URL, json=fields, headers=headers)

def _check_in(client, session_id, headers):
    return client.post(CHECKIN_URL, json={
        'sessionId': session_id,
        'latitude': LAGOS[0],
        'longitude': LAGOS[1]
    }, headers=headers)

def test_create_fixed_window_session(client, location, lecturer_headers):
    response = _create(client, lecturer_headers, course_code='CSC301', location_id=location.id)

    assert response.status_code == 201
    data = response.get_json()['data']
    starts_at = datetime.fromisoformat(data['starts_at'])
    expires_at = datetime.fromisoformat(data['expires_at'])
    assert expires_at - starts_at == timedelta(minutes=15)
    assert data['window_strategy'] == 'fixed'
    assert data['state'] == 'active'
    assert data['location']['id'] == location.id

def test_fixed_window_duration_override(client, location, lecturer_headers):
    response = _create(
        client, lecturer_headers,
        course_code='CSC301', location_id=location.id, duration_minutes=30
    )

    data = response.get_json()['data']
    delta = datetime.fromisoformat(data['expires_at']) - datetime.fromisoformat(data['starts_at'])
    assert delta == timedelta(minutes=30)

def test_create_scheduled_session(client, location, lecturer_headers, student_headers):
    starts_at = utcnow() + timedelta(hours=1)
    response = _create(
        client, lecturer_headers,
        course_code='MTH201',
        location_id=location.id,
        starts_at=_iso(starts_at),
        ends_at=_iso(starts_at + timedelta(hours=2))
    )

    assert response.status_code == 201
    data = response.get_json()['data']
    assert data['window_strategy'] == 'scheduled'
    assert data['state'] == 'scheduled'

    checkin = _check_in(client, data['id'], student_headers)
    assert checkin.status_code == 400
    assert checkin.get_json()['error'] == 'session_not_started'

def test_scheduled_session_must_end_after_start(client, location, lecturer_headers):
    starts_at = utcnow() + timedelta(hours=1)
    response = _create(
        client, lecturer_headers,
        course_code='MTH201',
        location_id=location.id,
        starts_at=_iso(starts_at),
        ends_at=_iso(starts_at - timedelta(minutes=5))
    )

    assert response.status_code == 400
    assert response.get_json()['message'] == 'ends_at must be after starts_at'

def test_scheduled_session_cannot_end_in_the_past(client, location, lecturer_headers):
    response = _create(
        client, lecturer_headers,
        course_code='MTH201',
        location_id=location.id,
        starts_at=_iso(utcnow() - timedelta(hours=3)),
        ends_at=_iso(utcnow() - timedelta(hours=1))
    )
    assert response.status_code == 400

def test_create_requires_location(client, lecturer_headers):
    response = _create(client, lecturer_headers, course_code='CSC301')
    assert response.status_code == 400

def test_create_rejects_someone_elses_location(client, location, other_lecturer_headers):
    response = _create(client, other_lecturer_headers, course_code='CSC301', location_id=location.id)

    assert response.status_code == 400
    assert response.get_json()['message'] == 'Location not found'

def test_auto_close_creates_rules(client, location, lecturer_headers):
    response = _create(
        client, lecturer_headers,
        course_code='CSC301', location_id=location.id, auto_close_minutes=5
    )

    session_id = response.get_json()['data']['id']
    rules = AttendanceRules.query.filter_by(session_id=session_id).one()
    assert rules.auto_close_minutes == 5

def test_students_cannot_create_sessions(client, location, student_headers):
    response = _create(client, student_headers, course_code='CSC301', location_id=location.id)
    assert response.status_code == 403

def test_end_session_blocks_check_in(client, open_session, lecturer_headers, student_headers):
    response = client.post(f'{SESSIONS_URL}{open_session.id}/end', headers=lecturer_headers)

    assert response.status_code == 200
    assert response.get_json()['data']['state'] == 'ended'

    checkin = _check_in(client, open_session.id, student_headers)
    assert checkin.status_code == 400
    assert checkin.get_json()['error'] == 'session_expired'

def test_end_session_twice(client, open_session, lecturer_headers):
    client.post(f'{SESSIONS_URL}{open_session.id}/end', headers=lecturer_headers)
    response = client.post(f'{SESSIONS_URL}{open_session.id}/end', headers=lecturer_headers)
    assert response.status_code == 400

def test_other_lecturer_cannot_end_session(client, open_session, other_lecturer_headers):
    response = client.post(f'{SESSIONS_URL}{open_session.id}/end', headers=other_lecturer_headers)
    assert response.status_code == 404

def test_default_rules(client, open_session, lecturer_headers):
    response = client.get(f'{SESSIONS_URL}{open_session.id}/rules', headers=lecturer_headers)

    data = response.get_json()['data']
    assert data['location_radius_meters'] is None
    assert data['lateness_threshold_minutes'] == 15
    assert data['require_location'] is True

def test_upsert_rules(client, open_session, lecturer_headers):
    url = f'{SESSIONS_URL}{open_session.id}/rules'

    response = client.put(url, json={'location_radius_meters': 200}, headers=lecturer_headers)
    assert response.status_code == 200
    assert response.get_json()['data']['location_radius_meters'] == 200

    response = client.put(url, json={'require_location': False}, headers=lecturer_headers)
    data = response.get_json()['data']
    assert data['location_radius_meters'] == 200
    assert data['require_location'] is False
    assert AttendanceRules.query.filter_by(session_id=open_session.id).count() == 1

def test_rules_radius_widens_geofence(client, open_session, lecturer_headers, student_headers):
    client.put(
        f'{SESSIONS_URL}{open_session.id}/rules',
        json={'location_radius_meters': 1500},
        headers=lecturer_headers
    )

    response = client.post(CHECKIN_URL, json={
        'sessionId': open_session.id,
        'latitude': 6.5300,
        'longitude': 3.3900
    }, headers=student_headers)

    assert response.status_code == 200

def test_invalid_rules(client, open_session, lecturer_headers):
    url = f'{SESSIONS_URL}{open_session.id}/rules'

    assert client.put(url, json={'location_radius_meters': -5}, headers=lecturer_headers).status_code == 400
    assert client.put(url, json={'require_location': 'no'}, headers=lecturer_headers).status_code == 400

def test_active_sessions(client, open_session, make_session, student_headers):
    starts_at = utcnow() - timedelta(hours=2)
    make_session(starts_at=starts_at, expires_at=starts_at + timedelta(minutes=15), course_code='OLD100')

    response = client.get(f'{SESSIONS_URL}active', headers=student_headers)

    assert response.status_code == 200
    assert [s['id'] for s in response.get_json()['data']] == [open_session.id]

def test_list_own_sessions(client, open_session, lecturer_headers, other_lecturer_headers):
    response = client.get(SESSIONS_URL, headers=lecturer_headers)
    assert len(response.get_json()['data']) == 1

    response = client.get(SESSIONS_URL, headers=other_lecturer_headers)
    assert response.get_json()['data'] == []

def test_session_attendance(client, open_session, student, lecturer_headers, student_headers):
    _check_in(client, open_session.id, student_headers)

    response = client.get(f'{SESSIONS_URL}{open_session.id}/attendance', headers=lecturer_headers)

    data = response.get_json()['data']
    assert data['total'] == 1
    assert data['records'][0]['student_id'] == student.id
    assert data['records'][0]['student_name'] == 'Chidi Okeke'
    assert data['records'][0]['distance_meters'] == 0
