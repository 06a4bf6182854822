# tests/unit/contracts/test_http_descriptors.py
"""Tests for request and response descriptors."""

import json

import httpx
import pytest

from steadycall.contracts.errors import ConfigurationError
from steadycall.contracts.http import RequestDescriptor, ResponseDescriptor


class TestRequestDescriptor:
    def test_fixed_content_returned_every_time(self) -> None:
        request = RequestDescriptor("PUT", "/items/1", content=b"payload")

        assert request.body() == b"payload"
        assert request.body() == b"payload"

    def test_bodyless_request(self) -> None:
        assert RequestDescriptor("GET", "/models").body() is None

    def test_factory_called_per_body(self) -> None:
        calls: list[int] = []

        def factory() -> bytes:
            calls.append(1)
            return b"{}"

        request = RequestDescriptor("POST", "/x", body_factory=factory)
        request.body()
        request.body()

        assert len(calls) == 2

    def test_both_body_sources_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="either content or body_factory"):
            RequestDescriptor("POST", "/x", content=b"a", body_factory=lambda: b"b")

    @pytest.mark.parametrize(("method", "url"), [("", "/x"), ("GET", "")])
    def test_method_and_url_required(self, method: str, url: str) -> None:
        with pytest.raises(ConfigurationError, match="required"):
            RequestDescriptor(method, url)

    def test_for_json(self) -> None:
        request = RequestDescriptor.for_json("post", "/responses", {"model": "m", "input": "hi"}, headers={"X-A": "1"})

        assert request.method == "POST"
        assert request.headers["Content-Type"] == "application/json"
        assert request.headers["X-A"] == "1"
        assert json.loads(request.body() or b"") == {"model": "m", "input": "hi"}
        assert request.body() == b'{"model":"m","input":"hi"}'

    def test_for_json_header_override(self) -> None:
        request = RequestDescriptor.for_json("POST", "/x", {}, headers={"Content-Type": "application/vnd.api+json"})

        assert request.headers["Content-Type"] == "application/vnd.api+json"


class TestResponseDescriptor:
    @pytest.mark.parametrize(("status", "ok"), [(200, True), (201, True), (299, True), (301, False), (404, False)])
    def test_is_success(self, status: int, ok: bool) -> None:
        assert ResponseDescriptor(status_code=status).is_success is ok

    def test_text_and_json(self) -> None:
        response = ResponseDescriptor(status_code=200, content=b'{"a": 1}')

        assert response.text == '{"a": 1}'
        assert response.json() == {"a": 1}

    def test_json_raises_on_invalid_body(self) -> None:
        with pytest.raises(json.JSONDecodeError):
            ResponseDescriptor(status_code=200, content=b"not json").json()

    def test_request_id(self) -> None:
        response = ResponseDescriptor(status_code=200, headers=httpx.Headers({"X-Request-Id": "req_1"}))

        assert response.request_id == "req_1"
        assert ResponseDescriptor(status_code=200).request_id == ""

    def test_rate_limit_unset_by_default(self) -> None:
        assert ResponseDescriptor(status_code=200).rate_limit is None
