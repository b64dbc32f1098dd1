"""Tests for operator startup wiring."""

from __future__ import annotations

from unittest.mock import patch

import kopf

from source_operator import main


@patch("source_operator.main.health")
@patch("source_operator.main.initialize_tracing")
@patch("source_operator.main.structured_logging")
def test_configure(mock_logging, mock_tracing, mock_health):
    settings = kopf.OperatorSettings()

    main.configure(settings=settings)

    mock_logging.setup_structured_logging.assert_called_once()
    mock_tracing.assert_called_once()
    assert isinstance(settings.persistence.progress_storage, kopf.AnnotationsProgressStorage)
    assert isinstance(settings.persistence.diffbase_storage, kopf.AnnotationsDiffBaseStorage)
    assert settings.execution.max_workers == main.MAX_WORKERS
    mock_health.start_http_server.assert_called_once_with(main.METRICS_PORT)
    mock_health.mark_ready.assert_called_once()


@patch("source_operator.main.health")
def test_shutdown(mock_health):
    main.shutdown()

    mock_health.mark_not_ready.assert_called_once()


@patch("source_operator.main.kopf.run")
def test_run_clusterwide(mock_run):
    with patch.object(main, "WATCH_NAMESPACE", ""):
        main.run()

    mock_run.assert_called_once_with(clusterwide=True)


@patch("source_operator.main.kopf.run")
def test_run_single_namespace(mock_run):
    with patch.object(main, "WATCH_NAMESPACE", "team-a"):
        main.run()

    mock_run.assert_called_once_with(namespaces=["team-a"], clusterwide=False)

