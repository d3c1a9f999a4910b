import pytest


@pytest.mark.asyncio
async def test_invite_and_accept(client, acme):
    organization, people = acme
    base = f"/organizations/{organization['id']}"

    invited = await client.post(
        f"{base}/members", json={"username": "outsider"}, headers=people["admin"][0]
    )
    accepted = await client.post(f"{base}/accept", headers=people["outsider"][0])

    assert invited.status_code == 201
    assert invited.json()["joined_at"] is None
    assert accepted.status_code == 200
    assert accepted.json()["user_id"] == people["outsider"][1]["id"]
    assert (await client.get(base, headers=people["outsider"][0])).status_code == 200


@pytest.mark.asyncio
async def test_invite_unregistered_user_then_register(client, acme, register):
    organization, people = acme
    base = f"/organizations/{organization['id']}"

    invited = await client.post(
        f"{base}/members", json={"username": "newcomer"}, headers=people["owner"][0]
    )
    headers, _ = await register("ext-newcomer", "newcomer")
    accepted = await client.post(f"{base}/accept", json={"username": "newcomer"}, headers=headers)

    assert invited.status_code == 201
    assert invited.json()["user_id"] is None
    assert accepted.status_code == 200


@pytest.mark.asyncio
async def test_invite_errors(client, acme):
    organization, people = acme
    url = f"/organizations/{organization['id']}/members"

    duplicate = await client.post(url, json={"username": "member"}, headers=people["owner"][0])
    by_member = await client.post(url, json={"username": "outsider"}, headers=people["member"][0])
    bad_role = await client.post(
        url, json={"username": "outsider", "role": "superuser"}, headers=people["owner"][0]
    )

    assert duplicate.status_code == 409
    assert by_member.status_code == 403
    assert bad_role.status_code == 400
    assert bad_role.json()["error"]["details"]["issues"][0]["path"] == "body.role"


@pytest.mark.asyncio
async def test_change_role(client, acme):
    organization, people = acme
    member_id = people["member"][1]["id"]
    url = f"/organizations/{organization['id']}/members/{member_id}/role"

    by_admin = await client.put(url, json={"role": "admin"}, headers=people["admin"][0])
    by_owner = await client.put(url, json={"role": "admin"}, headers=people["owner"][0])
    to_owner = await client.put(url, json={"role": "owner"}, headers=people["owner"][0])

    assert by_admin.status_code == 403
    assert by_owner.status_code == 200
    assert by_owner.json()["role"] == "admin"
    assert to_owner.status_code == 409


@pytest.mark.asyncio
async def test_remove_member(client, acme):
    organization, people = acme
    member_id = people["member"][1]["id"]
    url = f"/organizations/{organization['id']}/members/{member_id}"

    removed = await client.delete(url, headers=people["admin"][0])
    again = await client.delete(url, headers=people["admin"][0])

    assert removed.status_code == 200
    assert removed.json()["deleted_at"] is not None
    assert again.status_code == 404


@pytest.mark.asyncio
async def test_revoke_invitation_by_username(client, acme):
    organization, people = acme
    base = f"/organizations/{organization['id']}"
    await client.post(f"{base}/members", json={"username": "newcomer"}, headers=people["owner"][0])

    revoked = await client.delete(
        f"{base}/members/newcomer", params={"by_username": "true"}, headers=people["owner"][0]
    )
    pending = await client.get(
        f"{base}/members", params={"include_pending": "true"}, headers=people["owner"][0]
    )

    assert revoked.status_code == 200
    assert "newcomer" not in [item["username"] for item in pending.json()["items"]]


@pytest.mark.asyncio
async def test_leave_organization(client, acme):
    organization, people = acme
    url = f"/organizations/{organization['id']}/members/me"

    left = await client.delete(url, headers=people["member"][0])
    owner_leaves = await client.delete(url, headers=people["owner"][0])

    assert left.status_code == 200
    assert left.json()["left_at"] is not None
    assert owner_leaves.status_code == 409


@pytest.mark.asyncio
async def test_transfer_is_reflected_in_member_roles(client, acme):
    organization, people = acme
    base = f"/organizations/{organization['id']}"

    await client.post(
        f"{base}/transfer-ownership",
        json={"new_owner_id": people["admin"][1]["id"]},
        headers=people["owner"][0],
    )
    members = await client.get(base + "/members", headers=people["admin"][0])

    roles = {item["username"]: item["role"] for item in members.json()["items"]}
    assert roles == {"owner": "member", "admin": "owner", "member": "member"}
