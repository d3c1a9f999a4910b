import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from config import ApplicationConfig
from tenantkit.adapter.repositories.sql.tables import drop_all
from tenantkit.api.app import create_app
from tenantkit.api.utils.jwt import create_access_token
from tenantkit.container import ToolkitOptions
from tenantkit.depends import build_adapters


@pytest.fixture
def test_config(tmp_path):
    class TestConfig(ApplicationConfig):
        DB_URI = f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"
        PERSISTENCE_BACKEND = "sql"
        ENABLE_LOGGING_MIDDLEWARE = False

    return TestConfig


@pytest.fixture
def options(test_config):
    return ToolkitOptions.from_config(test_config)


@pytest_asyncio.fixture
async def adapters(test_config, options):
    adapters = build_adapters(test_config, options)
    # ASGITransport does not run the lifespan, tables are created here
    await adapters.unit_of_work_factory.create_all()
    yield adapters
    factory = adapters.unit_of_work_factory
    await drop_all(factory.engine, factory.tables)
    await factory.dispose()


@pytest_asyncio.fixture
async def client(test_config, options, adapters):
    app = create_app(test_config, options, adapters)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers():
    def build(subject: str):
        return {"Authorization": f"Bearer {create_access_token(subject)}"}

    return build


@pytest.fixture
def register(client, auth_headers):
    """Register a user for `subject` and return (headers, user json)"""

    async def build(subject: str, username: str, **fields):
        headers = auth_headers(subject)
        response = await client.post("/users", json={"username": username, **fields}, headers=headers)
        assert response.status_code == 201, response.text
        return headers, response.json()

    return build


@pytest_asyncio.fixture
async def acme(client, register):
    """
    Organization "Acme" owned by owner, with an active admin and member.
    Returns (organization json, {username: (headers, user json)}).
    """
    people = {}
    for username in ("owner", "admin", "member", "outsider"):
        people[username] = await register(f"ext-{username}", username)

    owner_headers = people["owner"][0]
    response = await client.post("/organizations", json={"name": "Acme"}, headers=owner_headers)
    assert response.status_code == 201, response.text
    organization = response.json()

    for username, role in (("admin", "admin"), ("member", "member")):
        response = await client.post(
            f"/organizations/{organization['id']}/members",
            json={"username": username, "role": role},
            headers=owner_headers,
        )
        assert response.status_code == 201, response.text
        response = await client.post(
            f"/organizations/{organization['id']}/accept", headers=people[username][0]
        )
        assert response.status_code == 200, response.text

    return organization, people
