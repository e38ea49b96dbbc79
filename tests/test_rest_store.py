import json

import httpx
import pytest

from auth_session import GoTrueAuthBackend, Session
from contracts_domain import UploadedFile
from contracts_store_rest import RestContractStore
from errors import AuthFailure, FetchFailure, UploadFailure
from risk_classifier import RiskLevel

BASE = "https://backend.test"


def make_store(clock, handler, token="user-jwt"):
    return RestContractStore(
        BASE, "anon", clock,
        token_provider=lambda: token,
        transport=httpx.MockTransport(handler),
    )


def test_fetch_all_queries_user_rows(clock):
    seen = {}

    def handler(request):
        seen["url"] = request.url
        seen["auth"] = request.headers["Authorization"]
        return httpx.Response(200, json=[
            {"id": "1", "name": "NDA", "type": "NDA", "counterparty": "Acme",
             "expiration_date": "2026-01-10", "status": "Active", "risk_level": "Low"},
            {"id": "2", "name": "Lease", "type": "Lease", "counterparty": "Globex",
             "expiration_date": "2027-01-10", "status": "Draft"},
        ])

    got = make_store(clock, handler).fetch_all("u-1")

    assert seen["url"].path == "/rest/v1/contracts"
    assert seen["url"].params["user_id"] == "eq.u-1"
    assert seen["url"].params["order"] == "created_at.desc"
    assert seen["auth"] == "Bearer user-jwt"
    assert [c.id for c in got] == ["1", "2"]
    assert got[0].risk_level is RiskLevel.HIGH


def test_fetch_error_carries_backend_message(clock):
    def handler(request):
        return httpx.Response(401, json={"message": "JWT expired"})

    with pytest.raises(FetchFailure) as exc:
        make_store(clock, handler).fetch_all("u-1")
    assert exc.value.reason == "JWT expired"


def test_fetch_network_error(clock):
    def handler(request):
        raise httpx.ConnectError("boom", request=request)

    with pytest.raises(FetchFailure):
        make_store(clock, handler).fetch_all("u-1")


def test_upload_stores_object_then_row(clock):
    calls = []

    def handler(request):
        calls.append((request.method, request.url.path))
        if request.url.path.startswith("/storage/v1/object/contracts/u-1/"):
            assert request.content == b"%PDF"
            assert request.headers["Content-Type"] == "application/pdf"
            return httpx.Response(200, json={"Key": "contracts/u-1/x"})
        if request.url.path == "/rest/v1/contracts":
            row = json.loads(request.content)
            assert row["user_id"] == "u-1"
            assert row["status"] == "Draft"
            assert request.headers["Prefer"] == "return=representation"
            return httpx.Response(201, json=[{"id": "new-1", **row}])
        return httpx.Response(404)

    c = make_store(clock, handler).upload(UploadedFile("Deal.pdf", b"%PDF"), "u-1")

    assert c.id == "new-1"
    assert c.name == "Deal.pdf"
    assert c.file_path.startswith("u-1/")
    assert [m for m, _ in calls] == ["POST", "POST"]


def test_upload_rejected_reason_is_verbatim(clock):
    def handler(request):
        return httpx.Response(400, json={"error": "Duplicate", "message": "The resource already exists"})

    with pytest.raises(UploadFailure) as exc:
        make_store(clock, handler).upload(UploadedFile("a.pdf", b"x"), "u-1")
    assert exc.value.reason == "The resource already exists"


def test_upload_row_failure_removes_object(clock):
    calls = []

    def handler(request):
        calls.append(request.method)
        if request.url.path == "/rest/v1/contracts":
            return httpx.Response(403, json={"message": "new row violates row-level security policy"})
        return httpx.Response(200, json={})

    with pytest.raises(UploadFailure) as exc:
        make_store(clock, handler).upload(UploadedFile("a.pdf", b"x"), "u-1")
    assert "row-level security" in exc.value.reason
    assert calls == ["POST", "POST", "DELETE"]


def test_gotrue_sign_in_and_out():
    def handler(request):
        if request.url.path == "/auth/v1/token":
            assert request.url.params["grant_type"] == "password"
            assert request.headers["apikey"] == "anon"
            return httpx.Response(200, json={
                "access_token": "jwt", "user": {"id": "u-9", "email": "anna@example.com"},
            })
        if request.url.path == "/auth/v1/logout":
            assert request.headers["Authorization"] == "Bearer jwt"
            return httpx.Response(204)
        return httpx.Response(404)

    backend = GoTrueAuthBackend(BASE, "anon", transport=httpx.MockTransport(handler))
    s = backend.sign_in("anna@example.com", "pw")
    assert s == Session(user_id="u-9", email="anna@example.com", access_token="jwt")
    backend.sign_out(s)


def test_gotrue_rejects_bad_credentials():
    def handler(request):
        return httpx.Response(400, json={"error": "invalid_grant",
                                         "error_description": "Invalid login credentials"})

    backend = GoTrueAuthBackend(BASE, "anon", transport=httpx.MockTransport(handler))
    with pytest.raises(AuthFailure, match="Invalid login credentials"):
        backend.sign_in("anna@example.com", "bad")


@pytest.mark.parametrize("row_response", [
    httpx.Response(201, text=""),
    httpx.Response(201, json=[]),
    httpx.Response(201, json=[{"id": "new-1"}]),
])
def test_upload_unusable_row_response_removes_object(clock, row_response):
    calls = []

    def handler(request):
        calls.append(request.method)
        if request.url.path == "/rest/v1/contracts":
            return row_response
        return httpx.Response(200, json={})

    with pytest.raises(UploadFailure) as exc:
        make_store(clock, handler).upload(UploadedFile("a.pdf", b"x"), "u-1")
    assert exc.value.file_name == "a.pdf"
    assert calls == ["POST", "POST", "DELETE"]


@pytest.mark.parametrize("response", [
    httpx.Response(200, text="<html>gateway</html>"),
    httpx.Response(200, json=["unexpected"]),
    httpx.Response(200, json={"access_token": "jwt"}),
    httpx.Response(200, json={"user": {"id": "u-9"}}),
])
def test_gotrue_unusable_success_body_is_auth_failure(response):
    backend = GoTrueAuthBackend(BASE, "anon", transport=httpx.MockTransport(lambda request: response))
    with pytest.raises(AuthFailure):
        backend.sign_in("anna@example.com", "pw")


def test_gotrue_sign_out_server_error():
    def handler(request):
        return httpx.Response(500, json={"msg": "internal error"})

    backend = GoTrueAuthBackend(BASE, "anon", transport=httpx.MockTransport(handler))
    with pytest.raises(AuthFailure, match="internal error"):
        backend.sign_out(Session(user_id="u-9", email="anna@example.com", access_token="jwt"))
