from unittest.mock import MagicMock

from impact_backend.health import service as health_service


def test_health_supabase_info_checks_tables(monkeypatch):
    sb = MagicMock()
    sb.table.return_value.select.return_value.limit.return_value.execute.return_value.data = [{"id": 1}]
    monkeypatch.setattr("impact_backend.infra.supabase_client.get_service_supabase", lambda: sb)
    monkeypatch.setattr(health_service.socket, "getaddrinfo", lambda host, port: [("ok",)])

    info = health_service.health_supabase_info()

    assert info["hostname"] == "project.supabase.test"
    assert info["dns_ok"] is True
    assert info["connect_ok"] is True
    assert set(info["tables"]) == {"payments", "shop_orders", "shop_products"}
    assert info["tables"]["payments"] == {"ok": True, "rows": 1}


def test_health_supabase_info_never_raises(monkeypatch):
    def _no_dns(host, port):
        raise OSError("Name or service not known")

    def _no_client():
        raise RuntimeError("SUPABASE_URL/SUPABASE_SERVICE_ROLE_KEY manquants")

    monkeypatch.setattr(health_service.socket, "getaddrinfo", _no_dns)
    monkeypatch.setattr("impact_backend.infra.supabase_client.get_service_supabase", _no_client)

    info = health_service.health_supabase_info()

    assert info["dns_ok"] is False
    assert "Name or service" in info["dns_error"]
    assert info["connect_ok"] is False
    assert "manquants" in info["error"]


def test_table_check_failure_is_reported(monkeypatch):
    sb = MagicMock()
    sb.table.side_effect = Exception("relation does not exist")
    monkeypatch.setattr("impact_backend.infra.supabase_client.get_service_supabase", lambda: sb)
    monkeypatch.setattr(health_service.socket, "getaddrinfo", lambda host, port: [])

    info = health_service.health_supabase_info()
    assert info["tables"]["payments"] == {"ok": False, "error": "relation does not exist"}
