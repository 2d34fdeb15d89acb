# tests/test_user.py
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select

from school_mgmt import create_app
from school_mgmt.models import School, User
from tests.conftest import DEFAULT_PASSWORD

pytestmark = pytest.mark.anyio


async def count_users(session_factory) -> int:
    async with session_factory() as session:
        return (await session.execute(select(func.count(User.id)))).scalar_one()


async def test_signup_with_wrong_key_creates_nothing(client, session_factory, seed):
    school = await seed.school()
    body = {
        "name": "Mallory",
        "email": "mallory@example.com",
        "password": "password123",
        "role": "school_admin",
        "school_id": school.id,
        "admin_key": "wrong-key",
    }

    for _ in range(3):
        r = await client.post("/api/user/signup", json=body)
        assert r.status_code == 401
        assert r.json()["ok"] is False

    assert await count_users(session_factory) == 0


async def test_signup_and_login(client, seed, app_settings):
    school = await seed.school()
    r = await client.post("/api/user/signup", json={
        "name": "Alice",
        "email": "Alice@Example.com",
        "password": "password123",
        "role": "school_admin",
        "school_id": school.id,
        "admin_key": app_settings.ADMIN_SIGNUP_KEY,
    })
    assert r.status_code == 200
    assert r.json()["data"]["user_id"]

    login = await client.post("/api/user/login", json={"email": "alice@example.com", "password": "password123"})
    assert login.status_code == 200
    data = login.json()["data"]
    assert data["user"]["role"] == "school_admin"
    assert data["user"]["school_id"] == school.id
    assert "password_hash" not in data["user"]
    assert data["access_token"] and data["refresh_token"]

    me = await client.get("/api/user/me", headers={"Authorization": f"Bearer {data['access_token']}"})
    assert me.json()["data"]["email"] == "alice@example.com"


async def test_signup_requires_existing_school(client, app_settings):
    base = {
        "name": "Bob",
        "email": "bob@example.com",
        "password": "password123",
        "role": "teacher",
        "admin_key": app_settings.ADMIN_SIGNUP_KEY,
    }
    missing = await client.post("/api/user/signup", json=base)
    assert missing.status_code == 400

    unknown = await client.post("/api/user/signup", json={**base, "school_id": 999})
    assert unknown.status_code == 404


async def test_signup_duplicate_email_conflicts(client, seed, app_settings):
    await seed.user("superadmin", email="taken@example.com")
    r = await client.post("/api/user/signup", json={
        "name": "Copy",
        "email": "taken@example.com",
        "password": "password123",
        "role": "superadmin",
        "admin_key": app_settings.ADMIN_SIGNUP_KEY,
    })
    assert r.status_code == 409


async def test_login_with_bad_credentials(client, seed):
    user = await seed.superadmin()

    wrong_password = await client.post("/api/user/login", json={"email": user.email, "password": "nope-nope"})
    unknown_email = await client.post("/api/user/login", json={"email": "ghost@example.com", "password": DEFAULT_PASSWORD})

    for r in (wrong_password, unknown_email):
        assert r.status_code == 401
        assert r.json()["errors"] == "Invalid credentials"


async def test_login_limit_survives_rotating_forwarded_for(session_factory, app_settings):
    app = create_app(app_settings.model_copy(update={"SECURITY_LIMIT_MAX_REQUESTS": 2}))
    await app.state.engine.dispose()
    app.state.session_factory = session_factory

    statuses = []
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        for i in range(4):
            r = await client.post(
                "/api/user/login",
                headers={"X-Forwarded-For": f"10.0.0.{i}"},
                json={"email": "ghost@example.com", "password": DEFAULT_PASSWORD}
            )
            statuses.append(r.status_code)

    assert statuses == [401, 401, 429, 429]


async def test_refresh_token_flow(client, seed):
    user = await seed.superadmin()
    login = (await client.post("/api/user/login", json={"email": user.email, "password": DEFAULT_PASSWORD})).json()["data"]

    r = await client.post("/api/user/refreshToken", json={"refresh_token": login["refresh_token"]})
    assert r.status_code == 200
    assert r.json()["data"]["access_token"]

    # An access token is not a refresh token
    bad = await client.post("/api/user/refreshToken", json={"refresh_token": login["access_token"]})
    assert bad.status_code == 401


async def test_create_admin_assigns_school(client, seed, session_factory):
    superadmin = await seed.superadmin()
    school = await seed.school()

    r = await client.post("/api/user/createAdmin", headers=seed.headers(superadmin), json={
        "name": "Admin One",
        "email": "admin1@example.com",
        "password": "password123",
        "role": "school_admin",
        "school_id": school.id,
    })
    assert r.status_code == 200
    admin_id = r.json()["data"]["user"]["id"]

    async with session_factory() as session:
        stored = await session.get(School, school.id)
        assert stored.school_admin_id == admin_id

    duplicate = await client.post("/api/user/createAdmin", headers=seed.headers(superadmin), json={
        "name": "Admin Two",
        "email": "admin1@example.com",
        "password": "password123",
        "role": "school_admin",
        "school_id": school.id,
    })
    assert duplicate.status_code == 409


async def test_create_admin_requires_superadmin(client, seed):
    school = await seed.school()
    admin = await seed.school_admin(school.id)

    r = await client.post("/api/user/createAdmin", headers=seed.headers(admin), json={
        "name": "Sneaky",
        "email": "sneaky@example.com",
        "password": "password123",
        "role": "superadmin",
    })
    assert r.status_code == 403


async def test_get_school_admins_is_paginated(client, seed):
    superadmin = await seed.superadmin()
    school = await seed.school()
    for _ in range(3):
        await seed.school_admin(school.id)

    r = await client.get("/api/user/getSchoolAdmins?page=2&limit=2", headers=seed.headers(superadmin))
    data = r.json()["data"]
    assert len(data["admins"]) == 1
    assert data["meta"] == {"total": 3, "page": 2, "limit": 2, "pages": 2}


async def test_delete_admin_reassigns_school(client, seed, session_factory):
    superadmin = await seed.superadmin()
    school = await seed.school()
    admin = await seed.school_admin(school.id)
    async with session_factory() as session:
        stored = await session.get(School, school.id)
        stored.school_admin_id = admin.id
        await session.commit()

    r = await client.request("DELETE", "/api/user/deleteAdmin", headers=seed.headers(superadmin), json={"id": admin.id})
    assert r.status_code == 200

    async with session_factory() as session:
        assert await session.get(User, admin.id) is None
        assert (await session.get(School, school.id)).school_admin_id == superadmin.id


async def test_delete_superadmin_hands_over_created_schools(client, seed, session_factory):
    remaining = await seed.superadmin()
    creator = await seed.superadmin()

    created = await client.post("/api/school/createSchool", headers=seed.headers(creator), json={
        "name": "Hilltop Academy", "address": "1 Hill Road", "school_owner": "Hilltop Trust"
    })
    school_id = created.json()["data"]["school"]["id"]

    r = await client.request("DELETE", "/api/user/deleteAdmin", headers=seed.headers(remaining),
                             json={"id": creator.id})
    assert r.status_code == 200

    async with session_factory() as session:
        assert await session.get(User, creator.id) is None
        school = await session.get(School, school_id)
        assert school.school_admin_id == remaining.id
        assert school.created_by == remaining.id


async def test_delete_admin_edge_cases(client, seed):
    superadmin = await seed.superadmin()
    school = await seed.school()
    teacher = await seed.teacher(school.id)
    headers = seed.headers(superadmin)

    own = await client.request("DELETE", "/api/user/deleteAdmin", headers=headers, json={"id": superadmin.id})
    assert own.status_code == 403

    not_admin = await client.request("DELETE", "/api/user/deleteAdmin", headers=headers, json={"id": teacher.id})
    assert not_admin.status_code == 404

    missing = await client.request("DELETE", "/api/user/deleteAdmin", headers=headers, json={"id": 4242})
    assert missing.status_code == 404


async def test_change_password(client, seed):
    user = await seed.superadmin()
    headers = seed.headers(user)

    wrong = await client.post("/api/user/changePassword", headers=headers, json={
        "current_password": "not-it", "new_password": "brand-new-pass"
    })
    assert wrong.status_code == 401

    ok = await client.post("/api/user/changePassword", headers=headers, json={
        "current_password": DEFAULT_PASSWORD, "new_password": "brand-new-pass"
    })
    assert ok.status_code == 200

    login = await client.post("/api/user/login", json={"email": user.email, "password": "brand-new-pass"})
    assert login.status_code == 200
