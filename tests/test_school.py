# tests/test_school.py
import pytest

pytestmark = pytest.mark.anyio

SCHOOL = {"name": "Northside High", "address": "1 North Road", "school_owner": "City Board"}


async def test_create_school(client, seed):
    superadmin = await seed.superadmin()

    r = await client.post("/api/school/createSchool", headers=seed.headers(superadmin), json=SCHOOL)
    assert r.status_code == 200
    school = r.json()["data"]["school"]
    assert school["name"] == SCHOOL["name"]
    assert school["school_admin_id"] == superadmin.id
    assert school["created_by"] == superadmin.id

    duplicate = await client.post("/api/school/createSchool", headers=seed.headers(superadmin), json=SCHOOL)
    assert duplicate.status_code == 409


async def test_create_school_requires_superadmin(client, seed):
    school = await seed.school()
    admin = await seed.school_admin(school.id)

    r = await client.post("/api/school/createSchool", headers=seed.headers(admin), json=SCHOOL)
    assert r.status_code == 403

    anonymous = await client.post("/api/school/createSchool", json=SCHOOL)
    assert anonymous.status_code == 401


async def test_get_schools_by_role(client, seed):
    superadmin = await seed.superadmin()
    first = await seed.school()
    await seed.school()
    admin = await seed.school_admin(first.id)
    teacher = await seed.teacher(first.id)

    everything = (await client.get("/api/school/getSchools", headers=seed.headers(superadmin))).json()["data"]
    assert everything["meta"]["total"] == 2

    own = (await client.get("/api/school/getSchools", headers=seed.headers(admin))).json()["data"]
    assert [school["id"] for school in own["schools"]] == [first.id]

    refused = await client.get("/api/school/getSchools", headers=seed.headers(teacher))
    assert refused.status_code == 403


async def test_get_school_tenant_rules(client, seed):
    mine = await seed.school()
    other = await seed.school()
    admin = await seed.school_admin(mine.id)

    ok = await client.get(f"/api/school/getSchool?id={mine.id}", headers=seed.headers(admin))
    assert ok.status_code == 200

    foreign = await client.get(f"/api/school/getSchool?id={other.id}", headers=seed.headers(admin))
    assert foreign.status_code == 403

    missing = await client.get("/api/school/getSchool?id=999", headers=seed.headers(admin))
    assert missing.status_code == 404


async def test_update_school(client, seed):
    superadmin = await seed.superadmin()
    school = await seed.school()
    taken = await seed.school()
    headers = seed.headers(superadmin)

    r = await client.patch("/api/school/updateSchool", headers=headers, json={"id": school.id, "address": "2 New Road"})
    assert r.status_code == 200
    assert r.json()["data"]["school"]["address"] == "2 New Road"

    clash = await client.patch("/api/school/updateSchool", headers=headers, json={"id": school.id, "name": taken.name})
    assert clash.status_code == 409

    missing = await client.patch("/api/school/updateSchool", headers=headers, json={"id": 999, "name": "Nope"})
    assert missing.status_code == 404


async def test_delete_school(client, seed):
    superadmin = await seed.superadmin()
    empty = await seed.school()
    busy = await seed.school()
    await seed.classroom(busy.id)
    headers = seed.headers(superadmin)

    in_use = await client.request("DELETE", "/api/school/deleteSchool", headers=headers, json={"id": busy.id})
    assert in_use.status_code == 409

    ok = await client.request("DELETE", "/api/school/deleteSchool", headers=headers, json={"id": empty.id})
    assert ok.status_code == 200

    gone = await client.get(f"/api/school/getSchool?id={empty.id}", headers=headers)
    assert gone.status_code == 404


async def test_page_size_follows_settings(client, seed, app_settings):
    headers = seed.headers(await seed.superadmin())
    await seed.school()

    default = (await client.get("/api/school/getSchools", headers=headers)).json()["data"]
    assert default["meta"]["limit"] == app_settings.DEFAULT_PAGE_SIZE

    too_big = await client.get(f"/api/school/getSchools?limit={app_settings.MAX_PAGE_SIZE + 1}", headers=headers)
    assert too_big.status_code == 400
    assert too_big.json()["errors"][0]["field"] == "limit"
