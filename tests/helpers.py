"""Shared helpers for API tests."""

import uuid

TEST_JWT_SECRET = "test-secret-0123456789abcdef"


def unique_username(prefix: str = "user") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


async def register(client, username: str, password: str = "pw") -> dict:
    r = await client.post("/auth/register", json={"username": username, "password": password})
    assert r.status_code == 200, r.text
    return r.json()


async def login(client, username: str, password: str = "pw") -> str:
    """Log in and return the token, leaving no cookie on the client."""
    r = await client.post("/auth/login", json={"username": username, "password": password})
    assert r.status_code == 200, r.text
    client.cookies.clear()
    return r.json()["token"]


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
