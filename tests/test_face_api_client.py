"""Unit tests for the remote recognition service client (httpx.MockTransport)."""

import httpx
import pytest

from core.exceptions import RemoteServiceError
from services.face_api_client import FaceApiClient


async def test_register_sends_all_crops_in_one_request(client, remote):
    payload = await client.register("alice", [b"a", b"b", b"c", b"d", b"e"], "magface", min_quality=3)

    assert payload["total_registered"] == 5
    assert len(remote.requests) == 1
    request = remote.requests[0]
    assert request.url.path == "/register"
    assert request.url.params["model"] == "magface"
    # min_quality only goes to the quality-aware backend
    assert "min_quality" not in request.url.params
    body = request.content
    for i in range(5):
        assert f'name="files"; filename="face_{i}.jpg"'.encode() in body
    assert b'name="name"' in body and b"alice" in body
    assert b"image/jpeg" in body


async def test_register_min_quality_for_qmagface(client, remote):
    await client.register("alice", [b"a"], "qmagface", min_quality=2)

    assert remote.requests[0].url.params["min_quality"] == "2"


async def test_register_qmagface_without_min_quality(client, remote):
    await client.register("alice", [b"a"], "qmagface", min_quality=None)

    assert "min_quality" not in remote.requests[0].url.params


async def test_recognize_params(client, remote):
    payload = await client.recognize(b"jpeg", "magface", 0.65)

    request = remote.requests[0]
    assert payload["name"] == "alice"
    assert request.url.params["threshold"] == "0.65"
    assert b'name="file"; filename="face.jpg"' in request.content


async def test_save_path_only_when_given(client, remote):
    await client.save_database()
    await client.save_database("  ")
    await client.save_database("/data/backup.pkl")

    assert [dict(r.url.params) for r in remote.requests] == [{}, {}, {"path": "/data/backup.pkl"}]


async def test_delete_missing_person_is_not_an_error(make_client):
    client, _ = make_client({("DELETE", "/database/bob"): (404, {"detail": "Person 'bob' does not exist"})})

    result = await client.delete_person("bob", "magface")

    assert result == {"success": False, "message": "Person 'bob' does not exist"}


async def test_delete_404_without_json_body(make_client):
    client, _ = make_client({("DELETE", "/database/bob"): (404, "nope")})

    result = await client.delete_person("bob", "magface")

    assert result == {"success": False, "message": "Person 'bob' not found in database"}


async def test_delete_encodes_name(make_client):
    client, remote = make_client({("DELETE", "/database/ann marie"): (200, {"success": True, "message": "Deleted"})})

    result = await client.delete_person("ann marie", "qmagface")

    assert result["success"] is True
    assert remote.requests[0].url.raw_path.startswith(b"/database/ann%20marie")
    assert remote.requests[0].url.params["model"] == "qmagface"


async def test_server_error_raises_remote_service_error(make_client):
    client, _ = make_client({("POST", "/recognize"): (500, "internal failure")})

    with pytest.raises(RemoteServiceError) as exc:
        await client.recognize(b"jpeg", "magface", 0.5)

    assert exc.value.status_code == 502
    assert exc.value.api_status_code == 500
    assert exc.value.api_response == "internal failure"


async def test_delete_other_errors_still_raise(make_client):
    client, _ = make_client({("DELETE", "/database/bob"): (503, "down")})

    with pytest.raises(RemoteServiceError):
        await client.delete_person("bob", "magface")


async def test_malformed_json_raises(make_client):
    client, _ = make_client({("GET", "/database/info"): (200, "<html>")})

    with pytest.raises(RemoteServiceError) as exc:
        await client.database_info("magface")

    assert exc.value.api_status_code == 200


async def test_network_failure_raises():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = FaceApiClient("http://face-api.test", transport=httpx.MockTransport(handler))

    with pytest.raises(RemoteServiceError) as exc:
        await client.database_info("magface")

    assert exc.value.api_status_code == 0
