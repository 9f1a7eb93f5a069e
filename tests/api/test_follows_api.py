# mypy: ignore-errors
# tests/api/test_follows_api.py
"""Tests for following and unfollowing issues."""

from fastapi import status


def test_follow_toggles(client, created_issue) -> None:
    url = f"/api/issues/{created_issue['id']}/follow"

    response = client.post(url, json={"userId": "user-a"})
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"following": True}
    assert client.get(url, params={"userId": "user-a"}).json() == {"following": True}

    assert client.post(url, json={"userId": "user-a"}).json() == {"following": False}
    assert client.get(url, params={"userId": "user-a"}).json() == {"following": False}


def test_follows_are_per_user(client, created_issue) -> None:
    url = f"/api/issues/{created_issue['id']}/follow"
    client.post(url, json={"userId": "user-a"})

    assert client.post(url, json={"userId": "user-b"}).json() == {"following": True}
    assert client.get(url, params={"userId": "user-a"}).json() == {"following": True}


def test_follow_requires_user(client, created_issue) -> None:
    response = client.post(f"/api/issues/{created_issue['id']}/follow", json={})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"] == "Invalid follow data"


def test_follow_state_requires_user(client, created_issue) -> None:
    response = client.get(f"/api/issues/{created_issue['id']}/follow")
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_follow_missing_issue(client) -> None:
    response = client.post("/api/issues/nope/follow", json={"userId": "user-a"})
    assert response.status_code == status.HTTP_404_NOT_FOUND
    response = client.get("/api/issues/nope/follow", params={"userId": "user-a"})
    assert response.status_code == status.HTTP_404_NOT_FOUND
