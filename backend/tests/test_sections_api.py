"""Tests for the section management endpoints."""
import json

from attendance_sync import db
from attendance_sync.models import Section, Student


def test_list_sections_includes_faculty(client, auth_headers, section):
    response = client.get('/api/sections/', headers=auth_headers)

    assert response.status_code == 200
    data = json.loads(response.data)
    assert data['count'] == 1
    assert data['data'][0]['faculty_name'] == 'Jane Doe'
    assert data['data'][0]['faculty_email'] == 'jane@school.edu'


def test_faculty_sections(client, auth_headers, faculty, other_faculty, section):
    Section(name='C', grade='11', faculty_id=other_faculty.id).save()

    response = client.get(f'/api/sections/faculty/{faculty.id}/sections', headers=auth_headers)

    assert [s['name'] for s in json.loads(response.data)['data']] == ['A']


def test_get_section_with_students(client, auth_headers, section, student):
    response = client.get(f'/api/sections/{section.id}', headers=auth_headers)

    data = json.loads(response.data)['data']
    assert data['name'] == 'A'
    assert [s['id'] for s in data['students']] == [student.id]


def test_create_section_defaults_to_caller(client, auth_headers, faculty):
    response = client.post('/api/sections/', headers=auth_headers, json={'name': 'B', 'grade': '9'})

    assert response.status_code == 201
    assert json.loads(response.data)['data']['faculty_id'] == faculty.id


def test_create_section_for_unknown_faculty(client, auth_headers):
    response = client.post('/api/sections/', headers=auth_headers, json={
        'name': 'B', 'grade': '9', 'facultyId': '00000000-0000-0000-0000-000000000000'
    })
    assert response.status_code == 404


def test_duplicate_section_name(client, auth_headers, section):
    response = client.post('/api/sections/', headers=auth_headers, json={'name': 'A', 'grade': '10'})
    assert response.status_code == 409


def test_same_name_for_other_faculty_is_allowed(client, auth_headers, other_faculty, section):
    response = client.post('/api/sections/', headers=auth_headers, json={
        'name': 'A', 'grade': '10', 'facultyId': other_faculty.id
    })
    assert response.status_code == 201


def test_update_section(client, auth_headers, section):
    response = client.put(f'/api/sections/{section.id}', headers=auth_headers, json={'grade': '11'})

    assert response.status_code == 200
    assert json.loads(response.data)['data']['grade'] == '11'


def test_delete_blocked_by_active_students(client, auth_headers, section, student):
    response = client.delete(f'/api/sections/{section.id}', headers=auth_headers)

    assert response.status_code == 409
    assert db.session.get(Section, section.id) is not None


def test_delete_section_with_only_inactive_students(client, auth_headers, section, student):
    student.update(is_active=False)
    section_id = section.id

    response = client.delete(f'/api/sections/{section_id}', headers=auth_headers)

    assert response.status_code == 200
    assert db.session.get(Section, section_id) is None
    assert Student.query.filter_by(section_id=section_id).count() == 0


def test_update_student_count(client, auth_headers, section, student):
    response = client.post(f'/api/sections/{section.id}/update-student-count', headers=auth_headers)

    assert json.loads(response.data)['data'] == {'sectionId': section.id, 'studentCount': 1}
