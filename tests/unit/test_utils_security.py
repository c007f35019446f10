from types import SimpleNamespace
from unittest.mock import MagicMock

from fastapi import FastAPI, Depends
from fastapi.testclient import TestClient

from impact_backend.utils import security as security_mod
from impact_backend.utils.security import determine_role, get_current_user, require_admin


def _make_app():
    app = FastAPI()

    @app.get("/me")
    def me(user=Depends(get_current_user)):
        return user

    @app.get("/admin")
    def admin(user=Depends(require_admin)):
        return {"ok": True}

    return app


def test_determine_role():
    assert determine_role(None, {"role": "admin"}) == "admin"
    assert determine_role(None, {"role": "ADMIN"}) == "admin"
    assert determine_role("Admin@Impact.test", {}) == "admin"
    assert determine_role("client@impact.test", None) == "user"
    assert determine_role(None, None) == "user"


def test_get_user_from_token_normalizes_supabase_user(monkeypatch):
    sb = MagicMock()
    sb.auth.get_user.return_value = SimpleNamespace(
        user=SimpleNamespace(id="u-1", email="admin@impact.test", user_metadata={"full_name": "Admin"})
    )
    monkeypatch.setattr("impact_backend.infra.supabase_client.get_supabase", lambda: sb)

    user = security_mod.get_user_from_token("tok")

    sb.auth.get_user.assert_called_once_with("tok")
    assert user == {
        "id": "u-1",
        "email": "admin@impact.test",
        "metadata": {"full_name": "Admin"},
        "role": "admin",
        "token": "tok",
    }


def test_get_user_from_token_without_user(monkeypatch):
    sb = MagicMock()
    sb.auth.get_user.return_value = SimpleNamespace(user=None)
    monkeypatch.setattr("impact_backend.infra.supabase_client.get_supabase", lambda: sb)
    assert security_mod.get_user_from_token("tok") == {}


def test_missing_token_is_401():
    client = TestClient(_make_app())
    r = client.get("/me")
    assert r.status_code == 401
    assert r.json()["detail"] == "Non authentifié"


def test_rejected_token_is_401(monkeypatch):
    def _boom(token):
        raise RuntimeError("invalid JWT")
    monkeypatch.setattr(security_mod, "get_user_from_token", _boom)

    r = TestClient(_make_app()).get("/me", headers={"Authorization": "Bearer expired"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Session expirée, veuillez vous connecter"


def test_require_admin_roles(monkeypatch):
    users = {
        "admin-token": {"id": "a", "email": "admin@impact.test", "role": "admin"},
        "user-token": {"id": "u", "email": "client@impact.test", "role": "user"},
    }
    monkeypatch.setattr(security_mod, "get_user_from_token", lambda token: users.get(token, {}))
    client = TestClient(_make_app())

    assert client.get("/admin", headers={"Authorization": "Bearer admin-token"}).json() == {"ok": True}

    r = client.get("/admin", headers={"Authorization": "Bearer user-token"})
    assert r.status_code == 403
    assert r.json()["detail"] == "Accès interdit"

    r = client.get("/admin", headers={"Authorization": "Bearer unknown"})
    assert r.status_code == 401
