import json
import unittest
from unittest.mock import patch

import httpx

from clawget.client import Clawget, map_registration
from clawget.errors import ClawgetError, ConfigurationError, TransportError


def _client(handler, **kwargs) -> Clawget:
    client = Clawget(api_key=kwargs.pop("api_key", "clg_test_key_123"), base_url="https://api.test/api", **kwargs)
    client._http.close()
    client._http = httpx.Client(transport=httpx.MockTransport(handler))  # type: ignore[attr-defined]
    return client


class TestConstruction(unittest.TestCase):
    def test_missing_api_key_fails_before_any_http_client_exists(self) -> None:
        for key in (None, "", "   "):
            with patch("clawget.client.httpx.Client") as mock_http:
                with self.assertRaises(ConfigurationError) as ctx:
                    Clawget(api_key=key)
            mock_http.assert_not_called()
            self.assertIn("API key is required", str(ctx.exception))

    def test_trailing_slash_is_stripped_from_base_url(self) -> None:
        client = Clawget(api_key="k", base_url="https://api.test/api///")
        try:
            self.assertEqual(client.base_url, "https://api.test/api")
            self.assertEqual(client._url("skills"), "https://api.test/api/skills")
        finally:
            client.close()

    def test_repr_redacts_api_key(self) -> None:
        client = Clawget(api_key="clg_abcdefghijklmnop")
        try:
            self.assertNotIn("clg_abcdefghijklmnop", repr(client))
        finally:
            client.close()


class TestRequest(unittest.TestCase):
    def test_headers_are_attached_and_api_key_cannot_be_overridden(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"ok": True})

        client = _client(handler, agent_id="agent_1")
        try:
            body = client.request("/thing", headers={"X-API-KEY": "evil", "x-extra": "1"})
        finally:
            client.close()

        self.assertEqual(body, {"ok": True})
        headers = seen[0].headers
        self.assertEqual(headers["x-api-key"], "clg_test_key_123")
        self.assertEqual(headers["x-agent-id"], "agent_1")
        self.assertEqual(headers["content-type"], "application/json")
        self.assertEqual(headers["x-extra"], "1")
        self.assertEqual(str(seen[0].url), "https://api.test/api/thing")

    def test_none_query_params_are_dropped(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        client = _client(handler)
        try:
            client.request("/skills", params={"q": "scraper", "category": None})
        finally:
            client.close()

        self.assertEqual(dict(seen[0].url.params), {"q": "scraper"})

    def test_error_status_raises_with_backend_message_and_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(402, json={"error": "Insufficient balance"})

        client = _client(handler)
        try:
            with self.assertRaises(ClawgetError) as ctx:
                client.request("/skills/buy", method="POST", body={"skillId": "s"})
        finally:
            client.close()

        err = ctx.exception
        self.assertEqual(err.status_code, 402)
        self.assertEqual(err.message, "Insufficient balance")
        self.assertEqual(err.response, {"error": "Insufficient balance"})
        self.assertTrue(err.is_insufficient_balance)
        self.assertFalse(err.is_not_found)

    def test_error_message_falls_back_to_message_then_default(self) -> None:
        bodies = iter([{"message": "Listing missing"}, {}])

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json=next(bodies))

        client = _client(handler)
        try:
            with self.assertRaises(ClawgetError) as first:
                client.request("/listings/x")
            with self.assertRaises(ClawgetError) as second:
                client.request("/listings/x")
        finally:
            client.close()

        self.assertEqual(first.exception.message, "Listing missing")
        self.assertTrue(first.exception.is_not_found)
        self.assertEqual(second.exception.message, "Request failed")

    def test_success_false_body_is_returned_unchanged(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"success": False, "error": "nope"})

        client = _client(handler)
        try:
            body = client.request("/wallet/balance")
        finally:
            client.close()

        self.assertEqual(body, {"success": False, "error": "nope"})

    def test_invalid_json_has_no_status(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"<html>oops</html>")

        client = _client(handler)
        try:
            with self.assertRaises(ClawgetError) as ctx:
                client.request("/categories")
        finally:
            client.close()

        self.assertIsNone(ctx.exception.status_code)
        self.assertTrue(ctx.exception.message.startswith("Invalid JSON response"))

    def test_transport_failure_is_wrapped(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = _client(handler)
        try:
            with self.assertRaises(TransportError) as ctx:
                client.request("/categories")
        finally:
            client.close()

        self.assertIsNone(ctx.exception.status_code)
        self.assertIn("connection refused", ctx.exception.message)

    def test_unicode_and_escapes_survive_the_round_trip(self) -> None:
        content = 'He said "hi"\\path\nline two 中文 🦀'
        received: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            payload = json.loads(request.content.decode("utf-8"))
            received.append(payload)
            return httpx.Response(201, json={"soul": {"slug": "s", "content": payload["content"]}})

        client = _client(handler)
        try:
            soul = client.souls.create(name="Poet", description="d", content=content)
        finally:
            client.close()

        self.assertEqual(received[0]["content"], content)
        self.assertEqual(soul["content"], content)


class TestDownloadBytes(unittest.TestCase):
    def test_api_key_only_sent_to_same_origin(self) -> None:
        seen: list[tuple[str, str | None]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append((request.url.host, request.headers.get("x-api-key")))
            return httpx.Response(200, content=b"PK\x03\x04")

        client = _client(handler)
        try:
            client.download_bytes("/packages/a.zip")
            data = client.download_bytes("https://cdn.example.com/a.zip")
        finally:
            client.close()

        self.assertEqual(data, b"PK\x03\x04")
        self.assertEqual(seen[0], ("api.test", "clg_test_key_123"))
        self.assertEqual(seen[1], ("cdn.example.com", None))

    def test_api_key_is_dropped_on_cross_origin_redirect(self) -> None:
        seen: list[tuple[str, str | None]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append((str(request.url), request.headers.get("x-api-key")))
            if request.url.host == "api.test":
                return httpx.Response(302, headers={"location": "https://cdn.example.com/pkg.zip"})
            return httpx.Response(200, content=b"PK\x03\x04")

        client = _client(handler)
        try:
            data = client.download_bytes("/skills/x/package.zip")
        finally:
            client.close()

        self.assertEqual(data, b"PK\x03\x04")
        self.assertEqual(
            seen,
            [
                ("https://api.test/api/skills/x/package.zip", "clg_test_key_123"),
                ("https://cdn.example.com/pkg.zip", None),
            ],
        )

    def test_failed_download_raises_with_status(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(403, json={"error": "Not purchased"})

        client = _client(handler)
        try:
            with self.assertRaises(ClawgetError) as ctx:
                client.download_bytes("/packages/a.zip")
        finally:
            client.close()

        self.assertEqual(ctx.exception.status_code, 403)
        self.assertEqual(ctx.exception.message, "Not purchased")


class TestRequestRedirects(unittest.TestCase):
    def test_same_origin_redirect_keeps_api_key(self) -> None:
        seen: list[tuple[str, str | None]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append((request.url.path, request.headers.get("x-api-key")))
            if request.url.path == "/api/skills/old":
                return httpx.Response(301, headers={"location": "/api/skills/new"})
            return httpx.Response(200, json={"slug": "new"})

        client = _client(handler)
        try:
            body = client.request("/skills/old")
        finally:
            client.close()

        self.assertEqual(body, {"slug": "new"})
        self.assertEqual(seen, [("/api/skills/old", "clg_test_key_123"), ("/api/skills/new", "clg_test_key_123")])

    def test_cross_origin_redirect_of_a_post_drops_api_key(self) -> None:
        seen: list[tuple[str, str, str | None, bytes]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append((request.method, request.url.host, request.headers.get("x-api-key"), request.content))
            if request.url.host == "api.test":
                return httpx.Response(307, headers={"location": "https://other.example.com/buy"})
            return httpx.Response(200, json={"ok": True})

        client = _client(handler)
        try:
            client.request("/skills/buy", method="POST", body={"skillId": "s"})
        finally:
            client.close()

        self.assertEqual(seen[1][:3], ("POST", "other.example.com", None))
        self.assertEqual(seen[1][3], seen[0][3])
        self.assertEqual(seen[0][2], "clg_test_key_123")

    def test_redirect_loop_is_a_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(302, headers={"location": "/api/loop"})

        client = _client(handler)
        try:
            with self.assertRaises(TransportError):
                client.request("/loop")
        finally:
            client.close()


class TestRegister(unittest.TestCase):
    def test_register_sends_no_api_key_and_maps_nested_response(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                201,
                json={
                    "agent": {"agent_id": "agent_42", "api_key": "clg_new"},
                    "wallet": {"deposit_address": "TXyz", "chain": "TRON", "currency": "USDT"},
                    "message": "Welcome",
                },
            )

        result = Clawget.register(
            name="Scout",
            base_url="https://api.test/api/",
            transport=httpx.MockTransport(handler),
        )

        self.assertEqual(
            result,
            {
                "apiKey": "clg_new",
                "agentId": "agent_42",
                "depositAddress": "TXyz",
                "chain": "TRON",
                "currency": "USDT",
                "message": "Welcome",
            },
        )
        request = seen[0]
        self.assertEqual(str(request.url), "https://api.test/api/v1/agents/register")
        self.assertNotIn("x-api-key", request.headers)
        self.assertEqual(json.loads(request.content), {"platform": "sdk", "name": "Scout"})

    def test_register_error_carries_status(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429, json={"message": "Slow down"})

        with self.assertRaises(ClawgetError) as ctx:
            Clawget.register(base_url="https://api.test/api", transport=httpx.MockTransport(handler))
        self.assertEqual(ctx.exception.status_code, 429)
        self.assertEqual(ctx.exception.message, "Slow down")

    def test_flat_response_is_returned_as_is(self) -> None:
        flat = {"apiKey": "k", "agentId": "a", "depositAddress": "d", "chain": "TRON", "currency": "USDT"}
        self.assertEqual(map_registration(flat), flat)

    def test_missing_api_key_in_response_is_an_error(self) -> None:
        with self.assertRaises(ClawgetError):
            map_registration({"agent": {"id": "a"}, "wallet": {}})


if __name__ == "__main__":
    unittest.main()
