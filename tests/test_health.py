"""Liveness check."""


async def test_health(client):
    """GET /health returns 200 and status ok."""
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json().get("status") == "ok"
