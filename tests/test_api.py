"""Tests for the /api/fetch-url endpoint.

The network is never touched: ``pagedigest.query._download_html`` is patched so
the real extraction pipeline runs on fixture HTML.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from pagedigest.api import create_app
from pagedigest.items import ExtractionResult
from pagedigest.query import FetchFailedError, FetchTimeoutError
from pagedigest.settings import Settings


@pytest.fixture()
def client():
    with TestClient(create_app(Settings(cors_origins=("*",)))) as c:
        yield c


def _post(client, body):
    return client.post("/api/fetch-url", json=body)


class TestFetchUrlSuccess:
    def test_returns_extraction_payload(self, client, article_html):
        with patch("pagedigest.query._download_html", return_value=article_html):
            resp = _post(client, {"url": "https://example.com/post"})
        assert resp.status_code == 200
        data = resp.json()
        assert set(data) == {"content", "url", "title", "description"}
        assert data["url"] == "https://example.com/post"
        assert data["title"] == "Solar Storage & The Grid"
        assert data["description"] == "How batteries are reshaping power markets."
        assert data["content"].startswith("# Solar Storage & The Grid")

    def test_plain_mode_forwarded(self, client):
        result = ExtractionResult(content="body", url="https://example.com/")
        with patch("pagedigest.api.fetch", return_value=result) as mock_fetch:
            resp = _post(client, {"url": "https://example.com/", "mode": "plain"})
        assert resp.status_code == 200
        assert mock_fetch.call_args.kwargs["mode"] == "plain"

    def test_app_settings_passed_through(self):
        cfg = Settings(max_length=30)
        result = ExtractionResult(content="body", url="https://example.com/")
        with TestClient(create_app(cfg)) as c, \
             patch("pagedigest.api.fetch", return_value=result) as mock_fetch:
            _post(c, {"url": "https://example.com/"})
        assert mock_fetch.call_args.kwargs["settings"] is cfg


class TestFetchUrlClientErrors:
    def test_missing_url(self, client):
        resp = _post(client, {})
        assert resp.status_code == 400
        assert resp.json() == {"error": "URL is required"}

    def test_null_url(self, client):
        resp = _post(client, {"url": None})
        assert resp.status_code == 400
        assert resp.json() == {"error": "URL is required"}

    def test_non_ascii_url_is_encoded(self, client, article_html):
        with patch("pagedigest.query._download_html", return_value=article_html) as mock_dl:
            resp = _post(client, {"url": "https://en.wikipedia.org/wiki/Café"})
        assert resp.status_code == 200
        assert resp.json()["url"] == "https://en.wikipedia.org/wiki/Caf%C3%A9"
        assert mock_dl.call_args.args[0] == "https://en.wikipedia.org/wiki/Caf%C3%A9"

    def test_invalid_url(self, client):
        with patch("pagedigest.query._download_html") as mock_fh:
            resp = _post(client, {"url": "not a url"})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid URL format"}
        mock_fh.assert_not_called()

    def test_upstream_status(self, client):
        exc = FetchFailedError("Failed to fetch URL: 404 Not Found", status=404)
        with patch("pagedigest.query._download_html", side_effect=exc):
            resp = _post(client, {"url": "https://example.com/missing"})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Failed to fetch URL: 404 Not Found"}

    def test_timeout(self, client):
        exc = FetchTimeoutError("Request timed out after 15s fetching https://example.com/")
        with patch("pagedigest.query._download_html", side_effect=exc):
            resp = _post(client, {"url": "https://example.com/"})
        assert resp.status_code == 400
        assert "timed out" in resp.json()["error"]

    def test_malformed_body(self, client):
        resp = _post(client, {"url": ["https://example.com/"]})
        assert resp.status_code == 400
        assert "error" in resp.json()

    def test_unknown_mode(self, client):
        resp = _post(client, {"url": "https://example.com/", "mode": "fancy"})
        assert resp.status_code == 400


class TestFetchUrlServerErrors:
    def test_unexpected_error_message(self, client):
        with patch("pagedigest.query._download_html", side_effect=RuntimeError("boom")):
            resp = _post(client, {"url": "https://example.com/"})
        assert resp.status_code == 500
        assert resp.json() == {"error": "boom"}

    def test_unexpected_error_without_message(self, client):
        with patch("pagedigest.query._download_html", side_effect=RuntimeError()):
            resp = _post(client, {"url": "https://example.com/"})
        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to fetch URL"}

    def test_parser_failure_is_500(self, client):
        with patch("pagedigest.query._download_html", return_value="<html></html>"), \
             patch("pagedigest.query.extract_sections", side_effect=ValueError("bad markup")):
            resp = _post(client, {"url": "https://example.com/"})
        assert resp.status_code == 500
        assert resp.json() == {"error": "bad markup"}
