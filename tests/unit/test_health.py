"""Tests for health check endpoints."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from source_operator import health
from source_operator.health import create_combined_wsgi_app


def make_environ(path: str) -> dict:
    return {
        "REQUEST_METHOD": "GET",
        "PATH_INFO": path,
        "SCRIPT_NAME": "",
        "SERVER_NAME": "localhost",
        "SERVER_PORT": "8080",
        "wsgi.url_scheme": "http",
    }


@pytest.fixture(autouse=True)
def reset_ready():
    health.mark_not_ready()
    yield
    health.mark_not_ready()


class TestCombinedWsgiApp:
    """Test cases for combined WSGI application."""

    def test_healthz(self):
        """Test /healthz always reports ok."""
        start_response = MagicMock()

        result = create_combined_wsgi_app()(make_environ("/healthz"), start_response)

        assert b'"status":"ok"' in b"".join(result)
        assert "200" in start_response.call_args[0][0]

    def test_readyz_before_startup(self):
        start_response = MagicMock()

        result = create_combined_wsgi_app()(make_environ("/readyz"), start_response)

        assert b'"status":"starting"' in b"".join(result)
        assert "503" in start_response.call_args[0][0]

    def test_readyz_after_startup(self):
        health.mark_ready()
        start_response = MagicMock()

        result = create_combined_wsgi_app()(make_environ("/readyz"), start_response)

        assert b'"status":"ready"' in b"".join(result)
        assert "200" in start_response.call_args[0][0]

    def test_content_type_is_json(self):
        start_response = MagicMock()

        create_combined_wsgi_app()(make_environ("/healthz"), start_response)

        headers = dict(start_response.call_args[0][1])
        assert "application/json" in headers["Content-Type"]

    @patch("source_operator.health.make_wsgi_app")
    def test_delegates_to_metrics(self, mock_make_wsgi):
        """Test combined app delegates /metrics to prometheus."""
        mock_metrics_app = MagicMock(return_value=[b"metrics data"])
        mock_make_wsgi.return_value = mock_metrics_app

        result = create_combined_wsgi_app()(make_environ("/metrics"), MagicMock())

        assert mock_metrics_app.called
        assert result == [b"metrics data"]


class TestReadiness:
    def test_mark_ready_and_not_ready(self):
        assert health.is_ready() is False
        health.mark_ready()
        assert health.is_ready() is True
        health.mark_not_ready()
        assert health.is_ready() is False


@patch("source_operator.health.threading.Thread")
@patch("source_operator.health.make_server")
def test_start_http_server(mock_make_server, mock_thread):
    """Test that the server is served from a daemon thread."""
    health.start_http_server(9090)

    mock_make_server.assert_called_once()
    assert mock_make_server.call_args[0][1] == 9090
    assert mock_thread.call_args[1]["daemon"] is True
    assert mock_thread.call_args[1]["target"] == mock_make_server.return_value.serve_forever
    mock_thread.return_value.start.assert_called_once()
