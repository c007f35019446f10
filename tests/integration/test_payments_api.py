import httpx
import pytest

from impact_backend.payments.service import AMOUNT_RANGE_MESSAGE, MISSING_FIELDS_MESSAGE

BODY = {"amount": 5000, "customer_name": "Awa Traoré", "customer_phone": "+22670000000", "customer_email": "awa@example.com"}


def _init(client, path="/payment", **kwargs):
    r = client.post(path, json=BODY, **kwargs)
    assert r.status_code == 200, r.text
    return r.json()


# --- initialisation ---

def test_initialize_returns_payment_url(client, payments_store, cinetpay):
    data = _init(client)
    assert set(data) == {"payment_url", "transaction_id"}
    assert data["payment_url"].endswith(data["transaction_id"])
    assert payments_store.rows[data["transaction_id"]]["status"] == "pending"


def test_initialize_with_explicit_action(client, payments_store, cinetpay):
    r = client.post("/payment?action=initialize", json=BODY)
    assert r.status_code == 200
    assert r.json()["transaction_id"].startswith("PAY-")


def test_initialize_uses_request_origin_for_return_url(client, payments_store, cinetpay):
    data = _init(client, headers={"Origin": "https://www.impactdigital.bf"})
    [sent] = cinetpay.calls("/payment")
    assert sent["return_url"] == f"https://www.impactdigital.bf/paiement?status=done&transaction_id={data['transaction_id']}"
    assert sent["cancel_url"] == "https://www.impactdigital.bf/paiement?status=cancelled"


def test_legacy_path_alias(client, payments_store, cinetpay):
    data = _init(client, path="/functions/v1/cinetpay-payment")
    r = client.get("/functions/v1/cinetpay-payment", params={"action": "status", "transaction_id": data["transaction_id"]})
    assert r.json()["data"]["status"] == "pending"


def test_initialize_missing_fields(client, payments_store, cinetpay):
    r = client.post("/payment", json={"amount": 5000, "customer_name": "Awa"})
    assert r.status_code == 400
    assert r.json() == {"error": MISSING_FIELDS_MESSAGE}
    assert cinetpay.requests == []


@pytest.mark.parametrize("amount", [99, 1_500_001])
def test_initialize_amount_out_of_range(client, payments_store, cinetpay, amount):
    r = client.post("/payment", json={**BODY, "amount": amount})
    assert r.status_code == 400
    assert r.json() == {"error": AMOUNT_RANGE_MESSAGE}
    assert payments_store.rows == {}


def test_initialize_empty_body(client, payments_store, cinetpay):
    r = client.post("/payment", content=b"")
    assert r.status_code == 400
    assert r.json() == {"error": MISSING_FIELDS_MESSAGE}


def test_initialize_provider_refusal(client, payments_store, cinetpay):
    cinetpay.init_code = "608"
    cinetpay.init_message = "MINIMUM_REQUIRED_FIELDS"
    r = client.post("/payment", json=BODY)
    assert r.status_code == 502
    assert r.json() == {"error": "CinetPay error [608]: MINIMUM_REQUIRED_FIELDS", "code": "608"}
    [row] = payments_store.rows.values()
    assert row["status"] == "pending"


def test_initialize_provider_timeout(client, payments_store, cinetpay):
    cinetpay.error = httpx.ReadTimeout("timed out")
    r = client.post("/payment", json=BODY)
    assert r.status_code == 504
    assert "timeout" in r.json()["error"]


def test_initialize_persistence_failure(client, payments_store, cinetpay):
    payments_store.fail_insert = True
    r = client.post("/payment", json=BODY)
    assert r.status_code == 500
    assert r.json() == {"error": "Erreur lors de la sauvegarde du paiement"}
    assert cinetpay.requests == []


# --- webhook ---

def test_notify_json_completes_payment(client, payments_store, cinetpay):
    tid = _init(client)["transaction_id"]
    r = client.post("/payment?action=notify", json={"cpm_trans_id": tid, "cpm_site_id": "123456"})
    assert r.status_code == 200
    assert r.json() == {"success": True}
    assert payments_store.rows[tid]["status"] == "completed"


def test_notify_form_encoded(client, payments_store, cinetpay):
    tid = _init(client)["transaction_id"]
    cinetpay.check_status = "REFUSED"
    r = client.post("/payment?action=notify", data={"cpm_trans_id": tid, "cpm_site_id": "123456"})
    assert r.status_code == 200
    assert r.json() == {"success": True}
    assert payments_store.rows[tid]["status"] == "failed"


def test_notify_missing_transaction_id(client, payments_store, cinetpay):
    r = client.post("/payment?action=notify", json={"cpm_site_id": "123456"})
    assert r.status_code == 400
    assert r.json() == {"error": "Missing transaction ID"}


def test_notify_invalid_body(client, payments_store, cinetpay):
    r = client.post("/payment?action=notify", content=b"not json", headers={"content-type": "application/json"})
    assert r.status_code == 400


def test_notify_unknown_transaction_is_acknowledged(client, payments_store, cinetpay):
    r = client.post("/payment?action=notify", json={"cpm_trans_id": "PAY-0-ghost0"})
    assert r.status_code == 200
    assert r.json() == {"success": True}
    assert payments_store.rows == {}


def test_notify_acknowledged_when_provider_down(client, payments_store, cinetpay):
    tid = _init(client)["transaction_id"]
    cinetpay.error = httpx.ConnectError("connection refused")
    r = client.post("/payment?action=notify", json={"cpm_trans_id": tid})
    assert r.status_code == 200
    assert r.json() == {"success": True}
    assert payments_store.rows[tid]["status"] == "pending"


# --- statut ---

def test_status_snapshot(client, payments_store, cinetpay):
    tid = _init(client)["transaction_id"]
    r = client.get("/payment", params={"action": "status", "transaction_id": tid})
    assert r.status_code == 200
    assert r.json() == {"data": {"status": "pending", "payment_method": None, "amount": 5000, "currency": "XOF"}}


def test_status_unknown_transaction(client, payments_store):
    r = client.get("/payment", params={"action": "status", "transaction_id": "PAY-0-nope00"})
    assert r.status_code == 200
    assert r.json() == {"data": None}


def test_status_missing_transaction_id(client, payments_store):
    r = client.get("/payment", params={"action": "status"})
    assert r.status_code == 400
    assert r.json() == {"error": "Missing transaction_id"}


@pytest.mark.parametrize("params", [{}, {"action": "notify"}, {"action": "list"}])
def test_get_other_actions_not_allowed(client, params):
    r = client.get("/payment", params=params)
    assert r.status_code == 405
    assert r.json() == {"error": "Method not allowed"}


def test_status_is_read_only(client, payments_store, cinetpay):
    tid = _init(client)["transaction_id"]
    for _ in range(3):
        client.get("/payment", params={"action": "status", "transaction_id": tid})
    assert cinetpay.calls("/payment/check") == []
    assert payments_store.rows[tid]["status"] == "pending"


def test_cors_preflight(client):
    r = client.options(
        "/payment",
        headers={"Origin": "https://impact.test", "Access-Control-Request-Method": "POST", "Access-Control-Request-Headers": "content-type"},
    )
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] in ("*", "https://impact.test")


def test_status_via_post(client, payments_store, cinetpay):
    tid = _init(client)["transaction_id"]
    r = client.post(f"/payment?action=status&transaction_id={tid}")
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "pending"
    assert len(payments_store.rows) == 1
