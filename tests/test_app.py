# tests/test_app.py
import pytest
from httpx import ASGITransport, AsyncClient

from school_mgmt import create_app, create_super_admin
from school_mgmt.core.database import close_db, init_db

pytestmark = pytest.mark.anyio


async def test_app_uses_configured_database(tmp_path, app_settings):
    db_file = tmp_path / "school.db"
    config = app_settings.model_copy(update={
        "DATABASE_URL": f"sqlite+aiosqlite:///{db_file}",
        "SUPER_ADMIN_EMAIL": "Root@Example.com",
        "SUPER_ADMIN_PASSWORD": "root-password",
    })
    app = create_app(config)
    assert app.state.engine.url.database == str(db_file)

    await init_db(app.state.engine)
    async with app.state.session_factory() as db:
        first = await create_super_admin(db, config)
        again = await create_super_admin(db, config)
    assert first.id == again.id

    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
            r = await client.post("/api/user/login", json={"email": "root@example.com", "password": "root-password"})
    finally:
        await close_db(app.state.engine)

    assert r.status_code == 200
    assert r.json()["data"]["user"]["role"] == "superadmin"
    assert db_file.exists()
