# tests/test_classrooms_api.py

import pytest

from classroom_api.models.user import UserRole

CLASSROOMS = "/api/v1/classrooms"


@pytest.fixture
async def owner_headers(make_user):
    _, headers = await make_user("owner@school.io")
    return headers


@pytest.fixture
async def stranger_headers(make_user):
    _, headers = await make_user("stranger@school.io")
    return headers


@pytest.fixture
async def classroom(client, owner_headers):
    response = await client.post(
        CLASSROOMS,
        json={"name": "CS", "startYear": 2021, "endYear": 2022},
        headers=owner_headers,
    )
    assert response.status_code == 201
    return response.json()


async def test_create_classroom_returns_camel_case(classroom):
    assert classroom["name"] == "CS"
    assert classroom["startYear"] == 2021
    assert classroom["endYear"] == 2022
    assert classroom["students"] == []
    assert classroom["attendanceRecords"] == []
    assert "createdBy" in classroom


async def test_create_classroom_requires_auth(client):
    response = await client.post(CLASSROOMS, json={"name": "CS", "startYear": 2021, "endYear": 2022})
    assert response.status_code == 401


async def test_create_classroom_with_inverted_years(client, owner_headers):
    response = await client.post(
        CLASSROOMS,
        json={"name": "CS", "startYear": 2023, "endYear": 2022},
        headers=owner_headers,
    )
    assert response.status_code == 400
    assert response.json()["detail"]["kind"] == "INVARIANT_VIOLATION"

    listing = await client.get(CLASSROOMS, headers=owner_headers)
    assert listing.json() == []


async def test_create_classroom_rejects_created_by(client, owner_headers):
    response = await client.post(
        CLASSROOMS,
        json={"name": "CS", "startYear": 2021, "endYear": 2022, "createdBy": 7},
        headers=owner_headers,
    )
    assert response.status_code == 422


async def test_list_classrooms_only_own(client, owner_headers, stranger_headers, classroom):
    await client.post(
        CLASSROOMS, json={"name": "Later", "startYear": 2023, "endYear": 2025}, headers=owner_headers
    )
    await client.post(
        CLASSROOMS, json={"name": "Theirs", "startYear": 2021, "endYear": 2022}, headers=stranger_headers
    )

    response = await client.get(CLASSROOMS, headers=owner_headers)

    assert response.status_code == 200
    body = response.json()
    assert [c["name"] for c in body] == ["Later", "CS"]
    assert all("students" not in c and "attendanceRecords" not in c for c in body)


async def test_get_classroom_is_public(client, classroom):
    response = await client.get(f"{CLASSROOMS}/{classroom['id']}")
    assert response.status_code == 200
    assert response.json()["id"] == classroom["id"]


async def test_get_missing_classroom(client):
    response = await client.get(f"{CLASSROOMS}/doesnotexist")
    assert response.status_code == 404
    assert response.json()["detail"]["kind"] == "NOT_FOUND"


async def test_update_classroom_forbidden_for_stranger(client, stranger_headers, classroom):
    response = await client.patch(
        f"{CLASSROOMS}/{classroom['id']}", json={"name": "Hacked"}, headers=stranger_headers
    )
    assert response.status_code == 403
    assert response.json()["detail"]["kind"] == "FORBIDDEN"

    unchanged = await client.get(f"{CLASSROOMS}/{classroom['id']}")
    assert unchanged.json()["name"] == "CS"


async def test_update_classroom_by_admin(client, make_user, classroom):
    _, admin_headers = await make_user("admin@school.io", role=UserRole.ADMIN)

    response = await client.patch(
        f"{CLASSROOMS}/{classroom['id']}", json={"imageUrl": "https://img/cs.png"}, headers=admin_headers
    )

    assert response.status_code == 200
    assert response.json()["imageUrl"] == "https://img/cs.png"
    assert response.json()["createdBy"] == classroom["createdBy"]


async def test_delete_classroom_twice(client, owner_headers, classroom):
    url = f"{CLASSROOMS}/{classroom['id']}"

    first = await client.delete(url, headers=owner_headers)
    second = await client.delete(url, headers=owner_headers)

    assert first.status_code == 204
    assert second.status_code == 404


async def test_student_routes(client, owner_headers, stranger_headers, classroom):
    students_url = f"{CLASSROOMS}/{classroom['id']}/students"

    created = await client.post(
        students_url, json={"name": "Bob", "admNo": "7", "imageUrl": "u"}, headers=owner_headers
    )
    assert created.status_code == 201
    student = created.json()
    assert student["admNo"] == "7"
    assert student["id"]

    forbidden = await client.post(
        students_url, json={"name": "Eve", "admNo": "0", "imageUrl": "e"}, headers=stranger_headers
    )
    assert forbidden.status_code == 403

    patched = await client.patch(
        f"{students_url}/{student['id']}", json={"name": "Robert"}, headers=owner_headers
    )
    assert patched.status_code == 204

    missing = await client.patch(f"{students_url}/unknown", json={"name": "x"}, headers=owner_headers)
    assert missing.status_code == 404

    stored = (await client.get(f"{CLASSROOMS}/{classroom['id']}")).json()
    assert [(s["name"], s["admNo"]) for s in stored["students"]] == [("Robert", "7")]

    deleted = await client.delete(f"{students_url}/{student['id']}", headers=owner_headers)
    assert deleted.status_code == 204
    assert (await client.get(f"{CLASSROOMS}/{classroom['id']}")).json()["students"] == []


async def test_add_student_requires_all_fields(client, owner_headers, classroom):
    response = await client.post(
        f"{CLASSROOMS}/{classroom['id']}/students", json={"name": "Bob"}, headers=owner_headers
    )
    assert response.status_code == 422


async def test_end_to_end_attendance_flow(client, owner_headers, classroom):
    classroom_url = f"{CLASSROOMS}/{classroom['id']}"
    bob = (
        await client.post(
            f"{classroom_url}/students",
            json={"name": "Bob", "admNo": "7", "imageUrl": "u"},
            headers=owner_headers,
        )
    ).json()

    added = await client.post(
        f"{classroom_url}/attendance",
        json={"day": "2022-03-01T09:00:00Z", "presentees": [bob["id"]]},
        headers=owner_headers,
    )
    assert added.status_code == 201
    record = added.json()
    assert record["presentees"] == [bob["id"]]

    during = (await client.get(classroom_url)).json()
    assert [r["id"] for r in during["attendanceRecords"]] == [record["id"]]

    removed = await client.delete(f"{classroom_url}/attendance/{record['id']}", headers=owner_headers)
    assert removed.status_code == 204

    after = (await client.get(classroom_url)).json()
    assert len(after["students"]) == 1
    assert after["attendanceRecords"] == []


async def test_delete_missing_attendance(client, owner_headers, classroom):
    response = await client.delete(
        f"{CLASSROOMS}/{classroom['id']}/attendance/unknown", headers=owner_headers
    )
    assert response.status_code == 404


async def test_update_classroom_null_image_url_clears_it(client, owner_headers):
    created = (
        await client.post(
            CLASSROOMS,
            json={"name": "CS", "startYear": 2021, "endYear": 2022, "imageUrl": "https://img/cs.png"},
            headers=owner_headers,
        )
    ).json()
    assert created["imageUrl"] == "https://img/cs.png"

    response = await client.patch(
        f"{CLASSROOMS}/{created['id']}", json={"imageUrl": None}, headers=owner_headers
    )

    assert response.status_code == 200
    assert response.json()["imageUrl"] is None
    assert response.json()["name"] == "CS"
    assert (await client.get(f"{CLASSROOMS}/{created['id']}")).json()["imageUrl"] is None


async def test_update_classroom_rejects_null_required_fields(client, owner_headers, classroom):
    for body in ({"name": None}, {"startYear": None}, {"students": None}):
        response = await client.patch(f"{CLASSROOMS}/{classroom['id']}", json=body, headers=owner_headers)
        assert response.status_code == 422

    stored = (await client.get(f"{CLASSROOMS}/{classroom['id']}")).json()
    assert stored["name"] == "CS"
    assert stored["startYear"] == 2021


async def test_update_student_rejects_null(client, owner_headers, classroom):
    students_url = f"{CLASSROOMS}/{classroom['id']}/students"
    student = (
        await client.post(students_url, json={"name": "Bob", "admNo": "7", "imageUrl": "u"}, headers=owner_headers)
    ).json()

    response = await client.patch(f"{students_url}/{student['id']}", json={"name": None}, headers=owner_headers)

    assert response.status_code == 422


async def test_classroom_image_url_must_be_a_url(client, owner_headers, classroom):
    created = await client.post(
        CLASSROOMS,
        json={"name": "CS", "startYear": 2021, "endYear": 2022, "imageUrl": "not a url"},
        headers=owner_headers,
    )
    assert created.status_code == 422

    patched = await client.patch(
        f"{CLASSROOMS}/{classroom['id']}", json={"imageUrl": "nope"}, headers=owner_headers
    )
    assert patched.status_code == 422


async def test_string_fields_are_trimmed(client, owner_headers):
    created = await client.post(
        CLASSROOMS,
        json={"name": "  CS  ", "startYear": 2021, "endYear": 2022, "imageUrl": " https://img/cs.png "},
        headers=owner_headers,
    )
    assert created.status_code == 201
    assert created.json()["name"] == "CS"
    assert created.json()["imageUrl"] == "https://img/cs.png"

    student = await client.post(
        f"{CLASSROOMS}/{created.json()['id']}/students",
        json={"name": " Bob ", "admNo": " 7 ", "imageUrl": " https://img/bob.png "},
        headers=owner_headers,
    )
    assert student.status_code == 201
    assert student.json()["name"] == "Bob"
    assert student.json()["admNo"] == "7"
    assert student.json()["imageUrl"] == "https://img/bob.png"


async def test_blank_student_name_is_rejected(client, owner_headers, classroom):
    response = await client.post(
        f"{CLASSROOMS}/{classroom['id']}/students",
        json={"name": "   ", "admNo": "7", "imageUrl": "u"},
        headers=owner_headers,
    )
    assert response.status_code == 422


async def test_attendance_presentees_are_distinct(client, owner_headers, classroom):
    added = await client.post(
        f"{CLASSROOMS}/{classroom['id']}/attendance",
        json={"day": "2022-03-01T09:00:00Z", "presentees": ["a", "a", "b"]},
        headers=owner_headers,
    )

    assert added.status_code == 201
    assert added.json()["presentees"] == ["a", "b"]
    stored = (await client.get(f"{CLASSROOMS}/{classroom['id']}")).json()
    assert stored["attendanceRecords"][0]["presentees"] == ["a", "b"]
