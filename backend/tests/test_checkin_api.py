"""HTTP tests for POST /api/attendance/checkin."""
from datetime import timedelta

from geocheckin.models import AttendanceRecord, utcnow

LAGOS = (6.5244, 3.3792)
CHECKIN_URL = '/api/attendance/checkin'

def _body(session_id, latitude=LAGOS[0], longitude=LAGOS[1], **extra):
    return {'sessionId': session_id, 'latitude': latitude, 'longitude': longitude, **extra}

def test_check_in_success(client, open_session, student_headers):
    response = client.post(CHECKIN_URL, json=_body(open_session.id), headers=student_headers)

    assert response.status_code == 200
    data = response.get_json()
    assert data['success'] is True
    assert data['message'] == 'Successfully checked in to CSC301!'
    assert data['data']['distance'] == 0
    assert data['data']['checkedInAt'].endswith('Z')
    assert AttendanceRecord.query.filter_by(id=data['data']['attendanceId']).count() == 1

def test_check_in_twice_is_refused(client, open_session, student_headers):
    client.post(CHECKIN_URL, json=_body(open_session.id), headers=student_headers)
    response = client.post(CHECKIN_URL, json=_body(open_session.id), headers=student_headers)

    assert response.status_code == 400
    data = response.get_json()
    assert data['success'] is False
    assert data['error'] == 'already_checked_in'
    assert 'retryable' not in data
    assert AttendanceRecord.query.count() == 1

def test_too_far_reports_distance(client, open_session, student_headers):
    response = client.post(
        CHECKIN_URL,
        json=_body(open_session.id, 6.5300, 3.3900),
        headers=student_headers
    )

    assert response.status_code == 400
    data = response.get_json()
    assert data['error'] == 'location_too_far'
    assert data['details']['allowedRadius'] == 50
    assert 1300 < data['details']['distance'] < 1400
    assert 'within 50m' in data['message']

def test_missing_fields(client, open_session, student_headers):
    response = client.post(
        CHECKIN_URL,
        json={'sessionId': open_session.id, 'latitude': LAGOS[0]},
        headers=student_headers
    )

    assert response.status_code == 400
    assert response.get_json()['error'] == 'sessionId, latitude, and longitude are required'

def test_missing_body(client, student_headers):
    response = client.post(CHECKIN_URL, headers=student_headers)
    assert response.status_code == 400

def test_non_numeric_coordinates(client, open_session, student_headers):
    response = client.post(
        CHECKIN_URL,
        json=_body(open_session.id, 'north', LAGOS[1]),
        headers=student_headers
    )

    assert response.status_code == 400
    assert AttendanceRecord.query.count() == 0

def test_out_of_range_coordinates(client, open_session, student_headers):
    response = client.post(CHECKIN_URL, json=_body(open_session.id, 91, 0), headers=student_headers)

    assert response.status_code == 400
    assert response.get_json()['error'] == 'coordinates_out_of_range'

def test_unknown_session(client, student, student_headers):
    response = client.post(CHECKIN_URL, json=_body('no-such-session'), headers=student_headers)

    assert response.status_code == 404
    assert response.get_json()['error'] == 'session_not_found'

def test_expired_session(client, make_session, student_headers):
    starts_at = utcnow() - timedelta(hours=2)
    expired = make_session(starts_at=starts_at, expires_at=starts_at + timedelta(minutes=15))

    response = client.post(CHECKIN_URL, json=_body(expired.id), headers=student_headers)

    assert response.status_code == 400
    assert response.get_json()['error'] == 'session_expired'

def test_requires_token(client, open_session):
    response = client.post(CHECKIN_URL, json=_body(open_session.id))

    assert response.status_code == 401
    data = response.get_json()
    assert data['success'] is False
    assert data['error'] == 'unauthenticated'
    assert data['message'] == 'Authorization token required'

def test_invalid_token(client, open_session):
    response = client.post(
        CHECKIN_URL,
        json=_body(open_session.id),
        headers={'Authorization': 'Bearer not-a-jwt'}
    )

    assert response.status_code == 401
    assert response.get_json()['success'] is False

def test_deleted_user_token(client, open_session, student, student_headers):
    student.delete()

    response = client.post(CHECKIN_URL, json=_body(open_session.id), headers=student_headers)

    assert response.status_code == 401
    assert response.get_json()['success'] is False

def test_lecturer_cannot_check_in(client, open_session, lecturer_headers):
    response = client.post(CHECKIN_URL, json=_body(open_session.id), headers=lecturer_headers)

    assert response.status_code == 403
    data = response.get_json()
    assert data['success'] is False
    assert data['error'] == 'forbidden'
    assert AttendanceRecord.query.count() == 0

def test_other_endpoints_keep_error_envelope(client):
    response = client.get('/api/attendance/my-records')

    assert response.status_code == 401
    data = response.get_json()
    assert data['error'] is True
    assert 'success' not in data

def test_huge_integer_coordinate(client, open_session, student_headers):
    response = client.post(
        CHECKIN_URL,
        json=_body(open_session.id, 10 ** 400, 0),
        headers=student_headers
    )

    assert response.status_code == 400
    assert response.get_json()['success'] is False
    assert AttendanceRecord.query.count() == 0

def test_student_id_in_body_is_ignored(client, open_session, student, second_student, student_headers):
    response = client.post(
        CHECKIN_URL,
        json=_body(open_session.id, studentId=second_student.id),
        headers=student_headers
    )

    assert response.status_code == 200
    record = AttendanceRecord.query.one()
    assert record.student_id == student.id

def test_device_info_must_be_an_object(client, open_session, student_headers):
    response = client.post(
        CHECKIN_URL,
        json=_body(open_session.id, deviceInfo='iPhone'),
        headers=student_headers
    )
    assert response.status_code == 400

def test_my_records_lists_own_check_ins(client, open_session, student_headers, second_student_headers):
    client.post(CHECKIN_URL, json=_body(open_session.id), headers=student_headers)

    response = client.get('/api/attendance/my-records', headers=student_headers)
    data = response.get_json()['data']
    assert data['total'] == 1
    assert data['records'][0]['course_code'] == 'CSC301'

    response = client.get('/api/attendance/my-records', headers=second_student_headers)
    assert response.get_json()['data']['total'] == 0
