"""Tests for the Supabase REST store."""

import json

import httpx
import pytest

from kairos.errors import ConfigurationError, StorageError
from kairos.storage import SupabaseStore


def make_store(handler) -> SupabaseStore:
    http = httpx.Client(transport=httpx.MockTransport(handler))
    return SupabaseStore("https://demo.supabase.co/", "anon-key", http)


class TestGetUser:
    def test_returns_user(self):
        seen = {}

        def handler(request):
            seen["request"] = request
            return httpx.Response(
                200, json={"id": "user-1", "email": "ada@example.com", "role": "authenticated"}
            )

        user = make_store(handler).get_user("jwt-token")

        assert user.id == "user-1"
        assert user.email == "ada@example.com"
        assert str(seen["request"].url) == "https://demo.supabase.co/auth/v1/user"
        assert seen["request"].headers["apikey"] == "anon-key"
        assert seen["request"].headers["Authorization"] == "Bearer jwt-token"

    def test_no_token_means_guest_without_request(self):
        def handler(request):
            raise AssertionError("no request expected")

        assert make_store(handler).get_user(None) is None

    def test_rejected_token_means_guest(self):
        store = make_store(lambda request: httpx.Response(401, json={"msg": "invalid JWT"}))

        assert store.get_user("expired") is None

    def test_server_error_raises(self):
        store = make_store(lambda request: httpx.Response(500, json={"message": "boom"}))

        with pytest.raises(StorageError, match="boom"):
            store.get_user("jwt-token")


class TestInsertRequest:
    def test_inserts_and_returns_row(self):
        seen = {}

        def handler(request):
            seen["request"] = request
            return httpx.Response(
                201,
                json=[{"id": 7, "user_id": "user-1", "input_text": "What is entropy?", "openai_response": None}],
            )

        row = make_store(handler).insert_request("user-1", "What is entropy?", "jwt-token")

        assert row.id == 7
        assert row.input_text == "What is entropy?"
        request = seen["request"]
        assert request.method == "POST"
        assert str(request.url) == "https://demo.supabase.co/rest/v1/learn_requests"
        assert request.headers["Prefer"] == "return=representation"
        assert request.headers["Authorization"] == "Bearer jwt-token"
        assert json.loads(request.content) == [{"user_id": "user-1", "input_text": "What is entropy?"}]

    def test_guest_falls_back_to_project_key(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers["Authorization"]
            return httpx.Response(201, json=[{"id": 1, "user_id": "u", "input_text": "q"}])

        make_store(handler).insert_request("u", "q")

        assert seen["auth"] == "Bearer anon-key"

    def test_rejected_insert_raises(self):
        store = make_store(
            lambda request: httpx.Response(
                403, json={"message": "new row violates row-level security policy"}
            )
        )

        with pytest.raises(StorageError, match="row-level security"):
            store.insert_request("user-1", "q", "jwt-token")

    def test_empty_representation_raises(self):
        store = make_store(lambda request: httpx.Response(201, json=[]))

        with pytest.raises(StorageError):
            store.insert_request("user-1", "q")

    def test_transport_failure_raises(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(StorageError):
            make_store(handler).insert_request("user-1", "q")


class TestUpdateResponse:
    def test_updates_by_row_id(self):
        seen = {}

        def handler(request):
            seen["request"] = request
            return httpx.Response(
                200,
                json=[{"id": 7, "user_id": "user-1", "input_text": "q", "openai_response": "answer"}],
            )

        rows = make_store(handler).update_response(7, "answer", "jwt-token")

        assert [row.openai_response for row in rows] == ["answer"]
        request = seen["request"]
        assert request.method == "PATCH"
        assert request.url.params["id"] == "eq.7"
        assert "input_text" not in request.url.params
        assert json.loads(request.content) == {"openai_response": "answer"}

    def test_failed_update_raises(self):
        store = make_store(lambda request: httpx.Response(400, json={"message": "bad column"}))

        with pytest.raises(StorageError, match="bad column"):
            store.update_response(7, "answer")


def test_missing_configuration():
    with pytest.raises(ConfigurationError):
        SupabaseStore("", "anon-key", httpx.Client())


def test_invalid_url_raises_storage_error():
    def handler(request):
        raise AssertionError("no request expected")

    http = httpx.Client(transport=httpx.MockTransport(handler))
    store = SupabaseStore("https://demo.supabase.co:abc", "anon-key", http)

    with pytest.raises(StorageError):
        store.get_user("jwt-token")


@pytest.mark.parametrize("body", [1, "ok", True])
def test_scalar_body_raises_storage_error(body):
    store = make_store(lambda request: httpx.Response(201, json=body))

    with pytest.raises(StorageError, match="unexpected body"):
        store.insert_request("user-1", "q")
