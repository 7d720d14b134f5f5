# tests/test_health.py
from unittest.mock import patch

from redis.exceptions import ConnectionError as RedisConnectionError

from supergains.api.middleware import SECURITY_HEADERS


def test_health(client):
    res = client.get("/api/health")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"
    assert res.json()["environment"] == "test"


def test_security_headers_on_every_response(client):
    for res in (client.get("/api/health"), client.get("/api/cart/")):
        for name, value in SECURITY_HEADERS.items():
            assert res.headers[name] == value


def test_database_health(client):
    res = client.get("/api/health/database")
    assert res.status_code == 200
    assert res.json()["component"] == "database"


def test_redis_health(client, fake_redis):
    assert client.get("/api/health/redis").status_code == 200

    with patch.object(fake_redis, "ping", side_effect=RedisConnectionError("down")):
        res = client.get("/api/health/redis")
    assert res.status_code == 503
    assert res.json()["success"] is False


def test_unknown_route_uses_error_envelope(client):
    res = client.get("/api/nope")
    assert res.status_code == 404
    assert res.json() == {"success": False, "error": "Not Found"}
