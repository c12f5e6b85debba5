"""
Integration tests for POST /dispatch

Transaction codes, permissions and persons are seeded in conftest.
"""

import pytest


@pytest.mark.asyncio
async def test_tx_53_returns_person_by_name(dispatch):
    response = await dispatch(53, "Ada")

    assert response.status_code == 200
    body = response.json()
    assert body["code"] == 200
    assert body["msg"] == "Person found"
    assert body["data"] == {"id": 1, "name": "Ada", "last_name": "Lovelace"}


@pytest.mark.asyncio
async def test_object_params_are_accepted(dispatch):
    response = await dispatch(53, {"name": "Grace"})

    assert response.status_code == 200
    assert response.json()["data"]["last_name"] == "Hopper"


@pytest.mark.asyncio
async def test_missing_person_is_404(dispatch):
    response = await dispatch(53, "Nobody")

    assert response.status_code == 404
    assert response.json() == {"code": 404, "msg": "Person not found"}


@pytest.mark.asyncio
async def test_unknown_tx_is_404(dispatch):
    response = await dispatch(999, "Ada")

    assert response.status_code == 404
    assert response.json() == {"code": 404, "msg": "Transaction not found"}


@pytest.mark.asyncio
async def test_public_profile_cannot_delete(dispatch):
    response = await dispatch(54, 1)

    assert response.status_code == 403
    assert response.json()["msg"] == "Permission denied"

    # Record still there
    still_there = await dispatch(53, "Ada")
    assert still_there.status_code == 200


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {},
        {"tx": "53"},
        {"tx": 0},
        {"tx": True},
        {"tx": 53, "params": ["Ada"]},
        [53],
    ],
)
async def test_malformed_body_is_400_with_alerts(client, body):
    response = await client.post("/dispatch", json=body)

    assert response.status_code == 400
    data = response.json()
    assert data["code"] == 400
    assert data["msg"] == "Invalid parameters"
    assert data["alerts"]


@pytest.mark.asyncio
async def test_invalid_json_is_400(client):
    response = await client.post(
        "/dispatch", content=b"{not json", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json()["code"] == 400


@pytest.mark.asyncio
async def test_handler_validation_alerts_are_returned(dispatch):
    response = await dispatch(53, {"name": ""})

    assert response.status_code == 400
    assert any(alert.startswith("name") for alert in response.json()["alerts"])


@pytest.mark.asyncio
async def test_anonymous_call_requires_login_without_public_profile(dispatch, app_config, monkeypatch):
    monkeypatch.setattr(app_config, "PUBLIC_PROFILE_ID", 0)

    response = await dispatch(53, "Ada")

    assert response.status_code == 401
    assert response.json()["msg"] == "Login required"


@pytest.mark.asyncio
async def test_invalid_bearer_is_401(dispatch):
    response = await dispatch(53, "Ada", token="not-a-jwt")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_member_crud_through_tx_codes(dispatch, register, login):
    await register()
    token = (await login()).json()["access_token"]

    created = await dispatch(51, {"name": "Alan", "last_name": "Turing"}, token=token)
    assert created.status_code == 201
    person_id = created.json()["data"]["id"]

    updated = await dispatch(52, {"id": person_id, "last_name": "M. Turing"}, token=token)
    assert updated.status_code == 200
    assert updated.json()["data"]["last_name"] == "M. Turing"

    fetched = await dispatch(50, person_id, token=token)
    assert fetched.json()["data"]["name"] == "Alan"

    deleted = await dispatch(54, {"id": person_id}, token=token)
    assert deleted.status_code == 200

    gone = await dispatch(50, person_id, token=token)
    assert gone.status_code == 404


@pytest.mark.asyncio
async def test_member_is_denied_public_only_operation(dispatch, register, login):
    await register()
    token = (await login()).json()["access_token"]

    response = await dispatch(13, "ada", token=token)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_dispatch_is_audited(dispatch, db_session):
    from sqlmodel import select

    from src.domain.entities import AuditEvent

    await dispatch(53, "Ada")
    await dispatch(54, 1)

    events = (await db_session.exec(select(AuditEvent))).all()
    actions = sorted(event.action for event in events)
    assert actions == ["tx_denied", "tx_exec"]
    assert all("params" not in event.event_metadata for event in events)
