import json
import os
from typing import Any, Dict, Generator, List, Optional
from unittest.mock import MagicMock

import httpx
import pytest

# Variables posées avant tout import de impact_backend (config lue à l'import)
os.environ.update({
    "CINETPAY_API_KEY": "test-api-key",
    "CINETPAY_SITE_ID": "123456",
    "CINETPAY_BASE_URL": "https://client.cinetpay.test/v1",
    "SUPABASE_URL": "https://project.supabase.test",
    "SUPABASE_SERVICE_ROLE_KEY": "service-role-key",
    "SUPABASE_ANON_KEY": "anon-key",
    "BASE_URL": "https://api.impact.test",
    "PUBLIC_SITE_URL": "https://impact.test",
    "ADMIN_EMAILS": "admin@impact.test",
    "DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS": "1",
})
os.environ.pop("LOCAL_RATE_LIMIT_FALLBACK", None)

from fastapi.testclient import TestClient

from impact_backend.app import app as fastapi_app
from impact_backend.payments import cinetpay_client
from impact_backend.utils.security import require_admin

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)

@pytest.fixture(scope="session")
def app():
    return fastapi_app

@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c

@pytest.fixture
def authenticated_admin_client(app, client):
    def _override_require_admin():
        return {"id": "admin-user-id", "role": "admin", "email": "admin@impact.test"}
    app.dependency_overrides[require_admin] = _override_require_admin
    yield client
    app.dependency_overrides.pop(require_admin, None)


# Aucun test ne doit joindre Supabase
@pytest.fixture(scope="function", autouse=True)
def mock_db_dependency(monkeypatch):
    monkeypatch.setattr("impact_backend.infra.supabase_client.get_supabase", lambda: MagicMock())
    monkeypatch.setattr("impact_backend.infra.supabase_client.get_service_supabase", lambda: MagicMock())


class FakePaymentsStore:
    """Table 'payments' en mémoire, mêmes règles que le repository (garde status='pending')."""

    def __init__(self):
        self.rows: Dict[str, Dict[str, Any]] = {}
        self.fail_insert = False
        self.fail_update = False
        self.confirmed_orders: List[str] = []

    def insert_payment(self, record):
        if self.fail_insert:
            from impact_backend.errors import PersistenceError
            raise PersistenceError("Erreur lors de la sauvegarde du paiement")
        row = record.to_row()
        row.update({"payment_method": None, "cinetpay_data": None})
        self.rows[record.transaction_id] = row
        return dict(row)

    def get_payment(self, transaction_id):
        row = self.rows.get(transaction_id)
        return dict(row) if row else None

    def get_payment_snapshot(self, transaction_id):
        row = self.rows.get(transaction_id)
        if not row:
            return None
        return {k: row.get(k) for k in ("status", "payment_method", "amount", "currency")}

    def update_payment_verification(self, transaction_id, status, payment_method, provider_data):
        if self.fail_update:
            from impact_backend.errors import PersistenceError
            raise PersistenceError("Erreur lors de la mise à jour du paiement")
        row = self.rows.get(transaction_id)
        if not row or row["status"] != "pending":
            return []
        row.update({"status": status, "payment_method": payment_method, "cinetpay_data": provider_data})
        return [dict(row)]

    def list_payments(self, limit=100, status=None):
        rows = [dict(r) for r in self.rows.values() if not status or r["status"] == status]
        return rows[:limit]

    def confirm_order_for_payment(self, transaction_id):
        self.confirmed_orders.append(transaction_id)
        return True


@pytest.fixture
def payments_store(monkeypatch) -> FakePaymentsStore:
    store = FakePaymentsStore()
    for name in ("insert_payment", "get_payment", "get_payment_snapshot", "update_payment_verification", "list_payments"):
        monkeypatch.setattr(f"impact_backend.payments.repository.{name}", getattr(store, name))
    monkeypatch.setattr("impact_backend.orders.repository.confirm_order_for_payment", store.confirm_order_for_payment)
    return store


class FakeCinetPay:
    """Provider CinetPay simulé via httpx.MockTransport (enveloppes {code, message, data})."""

    def __init__(self):
        self.requests: List[Dict[str, Any]] = []
        self.init_code = "201"
        self.init_message = "CREATED"
        self.check_status: Optional[str] = "ACCEPTED"
        self.payment_method = "OM"
        self.error: Optional[Exception] = None

    def calls(self, path: str) -> List[Dict[str, Any]]:
        return [r["body"] for r in self.requests if r["path"] == path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        if self.error is not None:
            raise self.error
        body = json.loads(request.content or b"{}")
        path = request.url.path.split("/v1", 1)[-1]
        self.requests.append({"path": path, "body": body})

        if path == "/payment/check":
            return httpx.Response(200, json={
                "code": "00",
                "message": "SUCCES",
                "data": {
                    "amount": "5000",
                    "currency": "XOF",
                    "status": self.check_status,
                    "payment_method": self.payment_method,
                },
            })
        if self.init_code != "201":
            return httpx.Response(200, json={"code": self.init_code, "message": self.init_message, "data": None})
        return httpx.Response(200, json={
            "code": "201",
            "message": "CREATED",
            "data": {
                "payment_token": "tok-" + body["transaction_id"],
                "payment_url": "https://checkout.cinetpay.test/payment/" + body["transaction_id"],
            },
        })


@pytest.fixture
def cinetpay() -> Generator[FakeCinetPay, None, None]:
    fake = FakeCinetPay()
    cinetpay_client.set_transport(httpx.MockTransport(fake.handler))
    try:
        yield fake
    finally:
        cinetpay_client.set_transport(None)
