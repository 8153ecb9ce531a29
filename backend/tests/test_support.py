"""
Tests for support tickets, the staff inbox and promoter applications.
"""

import re

import pytest
from httpx import AsyncClient


async def open_ticket(client: AsyncClient, headers: dict, subject="Refund", message="Event was cancelled"):
    response = await client.post(
        "/api/v1/support/tickets",
        json={"subject": subject, "message": message},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_create_ticket(client: AsyncClient, test_user, headers_for):
    ticket = await open_ticket(client, headers_for(test_user))
    assert ticket["sender_user_id"] == test_user.id
    assert ticket["status"] == "open"
    assert ticket["category"] == "general"
    assert ticket["handled_by_admin_id"] is None
    assert ticket["message_body"] == "Event was cancelled"
    assert [e["kind"] for e in ticket["entries"]] == ["message"]


@pytest.mark.asyncio
async def test_promoter_can_open_ticket(client: AsyncClient, promoter, headers_for):
    ticket = await open_ticket(client, headers_for(promoter))
    assert ticket["sender_user_id"] == promoter.id


@pytest.mark.asyncio
async def test_staff_cannot_open_ticket(client: AsyncClient, admin, owner, headers_for):
    for user in (admin, owner):
        response = await client.post(
            "/api/v1/support/tickets",
            json={"subject": "Hi", "message": "Hello"},
            headers=headers_for(user),
        )
        assert response.status_code == 403


@pytest.mark.asyncio
async def test_ticket_requires_message(client: AsyncClient, test_user, headers_for):
    response = await client.post(
        "/api/v1/support/tickets",
        json={"subject": "Empty", "message": ""},
        headers=headers_for(test_user),
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_admin_reply_takes_ownership(client: AsyncClient, test_user, admin, headers_for):
    ticket = await open_ticket(client, headers_for(test_user))

    response = await client.post(
        f"/api/v1/support/tickets/{ticket['id']}/replies",
        json={"message": "Refund issued"},
        headers=headers_for(admin),
    )
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "in_progress"
    assert data["handled_by_admin_id"] == admin.id
    assert data["message_body"] == (
        "Event was cancelled\n\n--- Admin Reply ---\nRefund issued"
    )


@pytest.mark.asyncio
async def test_sender_reply_reopens_resolved_ticket(client: AsyncClient, test_user, admin, headers_for):
    ticket = await open_ticket(client, headers_for(test_user))

    await client.post(
        f"/api/v1/support/tickets/{ticket['id']}/replies",
        json={"message": "Refund issued"},
        headers=headers_for(admin),
    )
    response = await client.patch(
        f"/api/v1/support/inbox/{ticket['id']}/status",
        json={"status": "resolved"},
        headers=headers_for(admin),
    )
    assert response.json()["status"] == "resolved"

    response = await client.post(
        f"/api/v1/support/tickets/{ticket['id']}/replies",
        json={"message": "Still not received"},
        headers=headers_for(test_user),
    )
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "open"
    # The handler stays as it was
    assert data["handled_by_admin_id"] == admin.id
    assert data["message_body"] == (
        "Event was cancelled\n\n"
        "--- Admin Reply ---\nRefund issued\n\n"
        "--- User Reply ---\nStill not received"
    )
    assert [e["kind"] for e in data["entries"]] == ["message", "admin_reply", "user_reply"]


@pytest.mark.asyncio
async def test_status_change_sets_and_clears_handler(client: AsyncClient, test_user, admin, headers_for):
    ticket = await open_ticket(client, headers_for(test_user))
    url = f"/api/v1/support/inbox/{ticket['id']}/status"
    headers = headers_for(admin)

    response = await client.patch(url, json={"status": "in_progress"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["handled_by_admin_id"] == admin.id

    response = await client.patch(url, json={"status": "open"}, headers=headers)
    assert response.json()["status"] == "open"
    assert response.json()["handled_by_admin_id"] is None


@pytest.mark.asyncio
async def test_status_change_to_same_status(client: AsyncClient, test_user, admin, headers_for):
    ticket = await open_ticket(client, headers_for(test_user))
    response = await client.patch(
        f"/api/v1/support/inbox/{ticket['id']}/status",
        json={"status": "open"},
        headers=headers_for(admin),
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_only_staff_change_status(client: AsyncClient, test_user, headers_for):
    ticket = await open_ticket(client, headers_for(test_user))
    response = await client.patch(
        f"/api/v1/support/inbox/{ticket['id']}/status",
        json={"status": "resolved"},
        headers=headers_for(test_user),
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_other_users_cannot_see_ticket(
    client: AsyncClient, test_user, promoter, admin, headers_for
):
    ticket = await open_ticket(client, headers_for(test_user))
    url = f"/api/v1/support/tickets/{ticket['id']}"

    assert (await client.get(url, headers=headers_for(test_user))).status_code == 200
    assert (await client.get(url, headers=headers_for(admin))).status_code == 200
    assert (await client.get(url, headers=headers_for(promoter))).status_code == 403

    response = await client.post(
        f"{url}/replies", json={"message": "Me too"}, headers=headers_for(promoter)
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_missing_ticket(client: AsyncClient, admin, headers_for):
    response = await client.get("/api/v1/support/tickets/5555", headers=headers_for(admin))
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_own_ticket_listing(client: AsyncClient, test_user, promoter, headers_for):
    await open_ticket(client, headers_for(test_user), subject="Mine")
    await open_ticket(client, headers_for(promoter), subject="Theirs")

    response = await client.get("/api/v1/support/tickets", headers=headers_for(test_user))
    assert response.status_code == 200
    assert [t["subject"] for t in response.json()] == ["Mine"]


@pytest.mark.asyncio
async def test_inbox_filter(client: AsyncClient, test_user, admin, headers_for):
    first = await open_ticket(client, headers_for(test_user), subject="First")
    await open_ticket(client, headers_for(test_user), subject="Second")
    await client.patch(
        f"/api/v1/support/inbox/{first['id']}/status",
        json={"status": "resolved"},
        headers=headers_for(admin),
    )
    headers = headers_for(admin)

    response = await client.get("/api/v1/support/inbox", headers=headers)
    assert response.status_code == 200
    assert sorted(t["subject"] for t in response.json()) == ["First", "Second"]

    response = await client.get("/api/v1/support/inbox", params={"filter": "open"}, headers=headers)
    assert [t["subject"] for t in response.json()] == ["Second"]

    response = await client.get("/api/v1/support/inbox", params={"filter": "resolved"}, headers=headers)
    assert [t["subject"] for t in response.json()] == ["First"]

    response = await client.get("/api/v1/support/inbox", params={"filter": "closed"}, headers=headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_inbox_staff_only(client: AsyncClient, test_user, promoter, headers_for):
    for user in (test_user, promoter):
        response = await client.get("/api/v1/support/inbox", headers=headers_for(user))
        assert response.status_code == 403


@pytest.mark.asyncio
async def test_promoter_application(client: AsyncClient, test_user, headers_for):
    response = await client.post(
        "/api/v1/support/promoter-applications",
        json={
            "name": "Dana Lee",
            "instagram": "@danalee",
            "expected_attendees": "150",
            "experience": "Three years of club nights",
            "message": "Would love to list my events",
        },
        headers=headers_for(test_user),
    )
    assert response.status_code == 201
    data = response.json()
    assert data["subject"] == "Promoter Application"
    assert data["category"] == "promoter_application"
    assert data["status"] == "open"

    body = data["message_body"]
    assert body.startswith("Promoter Application Details:")
    assert "Name: Dana Lee" in body
    assert "Instagram: @danalee" in body
    assert "Expected Attendees per Event: 150" in body
    assert "Applicant Username: testuser" in body
    assert "Applicant Email: test@example.com" in body
    assert "Applicant Phone: 555-0100" in body
    assert re.search(r"^Application Date: \d{4}-\d{2}-\d{2}$", body, re.MULTILINE)


@pytest.mark.asyncio
async def test_only_users_apply_for_promoter(client: AsyncClient, promoter, admin, headers_for):
    application = {
        "name": "X",
        "instagram": "@x",
        "expected_attendees": "10",
        "experience": "None",
        "message": "Hi",
    }
    for user in (promoter, admin):
        response = await client.post(
            "/api/v1/support/promoter-applications", json=application, headers=headers_for(user)
        )
        assert response.status_code == 403


@pytest.mark.asyncio
async def test_blank_ticket_rejected(client: AsyncClient, test_user, headers_for):
    headers = headers_for(test_user)
    for payload in (
        {"subject": "  ", "message": "  "},
        {"subject": "Refund", "message": " \n\t "},
        {"subject": "   ", "message": "Event was cancelled"},
    ):
        response = await client.post("/api/v1/support/tickets", json=payload, headers=headers)
        assert response.status_code == 422

    response = await client.get("/api/v1/support/tickets", headers=headers)
    assert response.json() == []


@pytest.mark.asyncio
async def test_blank_reply_does_not_reopen_ticket(client: AsyncClient, test_user, admin, headers_for):
    ticket = await open_ticket(client, headers_for(test_user))
    url = f"/api/v1/support/tickets/{ticket['id']}"
    await client.patch(
        f"/api/v1/support/inbox/{ticket['id']}/status",
        json={"status": "resolved"},
        headers=headers_for(admin),
    )

    response = await client.post(f"{url}/replies", json={"message": "   "}, headers=headers_for(test_user))
    assert response.status_code == 422

    # Nor can staff claim it with an empty reply
    response = await client.post(f"{url}/replies", json={"message": "\n"}, headers=headers_for(admin))
    assert response.status_code == 422

    data = (await client.get(url, headers=headers_for(test_user))).json()
    assert data["status"] == "resolved"
    assert [e["kind"] for e in data["entries"]] == ["message"]


@pytest.mark.asyncio
async def test_ticket_text_is_trimmed(client: AsyncClient, test_user, headers_for):
    ticket = await open_ticket(
        client, headers_for(test_user), subject="  Refund  ", message="\nEvent was cancelled  "
    )
    assert ticket["subject"] == "Refund"
    assert ticket["message_body"] == "Event was cancelled"


@pytest.mark.asyncio
async def test_blank_promoter_application_rejected(client: AsyncClient, test_user, headers_for):
    response = await client.post(
        "/api/v1/support/promoter-applications",
        json={
            "name": " ",
            "instagram": "@x",
            "expected_attendees": "10",
            "experience": "Some",
            "message": "Hi",
        },
        headers=headers_for(test_user),
    )
    assert response.status_code == 422
