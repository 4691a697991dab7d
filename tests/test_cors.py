"""CORS behaviour: the dashboard is served from a different origin."""

ORIGIN = "https://dashboard.example.org"


def test_preflight(client):
    response = client.options(
        "/measurements",
        headers={
            "Origin": ORIGIN,
            "Access-Control-Request-Method": "GET",
            "Access-Control-Request-Headers": "content-type",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] in ("*", ORIGIN)
    assert "GET" in response.headers["access-control-allow-methods"]


def test_get_carries_cors_headers(client):
    response = client.get("/health", headers={"Origin": ORIGIN})

    assert response.headers["access-control-allow-origin"] in ("*", ORIGIN)


def test_error_responses_carry_cors_headers(client):
    response = client.post("/request", json={"type": "NOPE"}, headers={"Origin": ORIGIN})

    assert response.status_code == 400
    assert response.headers["access-control-allow-origin"] in ("*", ORIGIN)
