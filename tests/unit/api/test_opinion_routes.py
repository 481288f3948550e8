import pytest

pytestmark = pytest.mark.unit


def test_client_can_post_opinion(client, register):
    client_id, headers = register("client@example.pl", role="client")

    resp = client.post(
        "/api/opinions",
        headers=headers,
        json={"fachowiec_id": 5, "rating": 4, "comment": "Solidnie"},
    )

    assert resp.status_code == 200
    rows = client.get("/api/opinions/5").json()
    assert len(rows) == 1
    assert rows[0]["client_id"] == client_id
    assert rows[0]["rating"] == 4
    assert client.get("/api/opinions/6").json() == []


def test_pro_cannot_post_opinion(client, register):
    _, headers = register("pro@example.pl", role="pro")

    resp = client.post(
        "/api/opinions", headers=headers, json={"fachowiec_id": 5, "rating": 5}
    )

    assert resp.status_code == 403
    assert resp.json()["code"] == "FORBIDDEN"


def test_anonymous_cannot_post_opinion(client):
    resp = client.post("/api/opinions", json={"fachowiec_id": 5, "rating": 5})
    assert resp.status_code == 401


@pytest.mark.parametrize("rating", [0, 6])
def test_rating_out_of_range_is_rejected(client, register, rating):
    _, headers = register("client@example.pl", role="client")

    resp = client.post(
        "/api/opinions", headers=headers, json={"fachowiec_id": 5, "rating": rating}
    )

    assert resp.status_code == 422
