"""End-to-end tests for the /ws channel and the status publish endpoint."""

from fastapi.testclient import TestClient

from albumsync.main import app

PUBLISH_URL = "/api/v1/companies/3/projects/42/albums/7/status"


def _subscribe(ws, **scope) -> None:
    ws.send_json({"type": "subscribe", **scope})
    # A pong after subscribe proves the subscription was processed
    ws.send_json({"type": "ping"})
    assert ws.receive_json() == {"type": "pong"}


def test_subscribed_client_receives_published_status():
    with TestClient(app) as client:
        with client.websocket_connect("/ws") as ws:
            greeting = ws.receive_json()
            assert greeting["type"] == "connected"
            _subscribe(ws, projectId=42, companyId=3)

            response = client.post(PUBLISH_URL, json={"statusCode": "accepted", "comment": "looks good"})
            assert response.status_code == 200
            body = response.json()
            assert body["status_label"] == "Accepted"
            assert body["delivered_to"] == 1

            frame = ws.receive_json()
            assert frame["type"] == "album_status_updated"
            assert frame["albumId"] == "7"
            assert frame["projectId"] == "42"
            assert frame["data"]["statusCode"] == "accepted"
            assert frame["data"]["comment"] == "looks good"


def test_publish_by_alias():
    with TestClient(app) as client:
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            _subscribe(ws, projectId="42")

            response = client.post(PUBLISH_URL, json={"alias": "⚠️"})
            assert response.json()["status_code"] == "remarks"
            assert ws.receive_json()["data"]["statusName"] == "Remarks"


def test_other_scope_is_not_delivered():
    with TestClient(app) as client:
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            _subscribe(ws, projectId="99", companyId="5")

            response = client.post(PUBLISH_URL, json={"statusCode": "sent"})
            assert response.json()["delivered_to"] == 0

            ws.send_json({"type": "ping"})
            assert ws.receive_json() == {"type": "pong"}


def test_unknown_status_is_rejected():
    with TestClient(app) as client:
        response = client.post(PUBLISH_URL, json={"statusCode": "done"})
        assert response.status_code == 422

        response = client.post(PUBLISH_URL, json={})
        assert response.status_code == 422


def test_malformed_client_frames_do_not_close_the_socket():
    with TestClient(app) as client:
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            ws.send_text("{not json")
            ws.send_json({"type": "unsubscribe"})
            ws.send_json({"type": "ping"})
            assert ws.receive_json() == {"type": "pong"}


def test_chat_message_updates_subscribed_clients():
    with TestClient(app) as client:
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            _subscribe(ws, projectId="42")

            response = client.post(
                "/api/v1/companies/3/projects/42/chat-messages",
                json={"text": "АР-001 и КР-5 замечания", "albums": {"АР-001": 7}},
            )
            assert response.status_code == 200
            changes = response.json()["changes"]
            assert [(c["album_code"], c["applied"]) for c in changes] == [("АР-001", True), ("КР-5", False)]
            assert changes[0]["status_code"] == "remarks"
            assert changes[0]["reaction"] == "🤔"

            frame = ws.receive_json()
            assert frame["albumId"] == "7"
            assert frame["data"]["statusCode"] == "remarks"

            # Nothing was sent for the unknown code
            ws.send_json({"type": "ping"})
            assert ws.receive_json() == {"type": "pong"}


def test_chat_message_requires_text():
    with TestClient(app) as client:
        response = client.post("/api/v1/companies/3/projects/42/chat-messages", json={"text": ""})
        assert response.status_code == 422


def test_status_aliases_are_listed_per_status():
    with TestClient(app) as client:
        response = client.get("/api/v1/status-aliases")
        assert response.status_code == 200
        by_code = {row["code"]: row for row in response.json()}
        assert set(by_code) == {"waiting", "upload", "sent", "accepted", "remarks", "production"}
        assert "👍" in by_code["accepted"]["aliases"]
        assert by_code["accepted"]["label"] == "Accepted"
