from tradesync.core.auth import create_access_token, decode_token

from conftest import auth_header


def test_health(client):
    r = client.get("/api/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert body["service"] == "TradeSync"
    # seeded on startup
    assert [b["code"] for b in body["brokers"]] == ["brokerA", "brokerB"]
    assert body["brokers"][0]["endpoint"].endswith("/api/trades/broker-a")


def test_register_returns_token_with_broker_scope(register):
    token, user = register(brokers=("brokerA",))
    assert user["username"] == "trader1"
    assert user["firstName"] == "Test"
    assert user["brokers"] == ["brokerA"]

    claims = decode_token(token)
    assert claims.user_id == user["id"]
    assert claims.username == "trader1"
    assert claims.brokers == ["brokerA"]


def test_register_ignores_unknown_broker_codes(register):
    _, user = register(brokers=("brokerA", "brokerZ"))
    assert user["brokers"] == ["brokerA"]


def test_duplicate_registration_is_rejected(client, register):
    register()
    r = client.post("/api/auth/register", json={
        "username": "trader1", "email": "other@example.com", "password": "secret123",
    })
    assert r.status_code == 400
    body = r.json()
    assert body["status"] == "error"
    assert body["message"] == "Username or email already in use"
    assert "timestamp" in body


def test_register_validation_error(client):
    r = client.post("/api/auth/register", json={"username": "ab", "email": "nope", "password": "1"})
    assert r.status_code == 400
    body = r.json()
    assert body["message"] == "Validation error"
    paths = {e["path"] for e in body["errors"]}
    assert {"username", "email", "password"} <= paths


def test_login(client, register):
    register()
    r = client.post("/api/auth/login", json={"username": "trader1", "password": "secret123"})
    assert r.status_code == 200
    assert r.json()["user"]["brokers"] == ["brokerA", "brokerB"]
    assert decode_token(r.json()["token"]).brokers == ["brokerA", "brokerB"]


def test_login_bad_password(client, register):
    register()
    r = client.post("/api/auth/login", json={"username": "trader1", "password": "wrong-pass"})
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid username or password"


def test_me_requires_token(client):
    r = client.get("/api/auth/me")
    assert r.status_code == 401
    assert r.json()["message"] == "Authentication token is required"


def test_me_rejects_bad_and_expired_tokens(client):
    assert client.get("/api/auth/me", headers=auth_header("garbage")).status_code == 401
    expired = create_access_token({"sub": "1", "brokers": []}, expires_minutes=-5)
    r = client.get("/api/auth/me", headers=auth_header(expired))
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid or expired token"


def test_me_returns_claims(client, register):
    token, user = register()
    r = client.get("/api/auth/me", headers=auth_header(token))
    assert r.status_code == 200
    assert r.json() == {"userId": user["id"], "username": "trader1", "brokers": ["brokerA", "brokerB"]}
