"""
Locust event listeners for the chat run lifecycle.

- ``init``: validate configuration and attach the run context.  A
  missing app id, token or host aborts before any user spawns.  Also
  hooks ``report_to_master`` / ``worker_report`` so distributed runs
  sum the chat counters on the master.
- ``test_start``: stamp the start time.
- ``quitting``: evaluate thresholds, write ``summary.json`` and set the
  process exit code.

The functions are registered in :mod:`loadtest.locustfile`; keeping them
here lets tests call them with a bare ``Environment``.
"""

from __future__ import annotations

import logging

from locust.runners import WorkerRunner

from config import ConfigurationError, get_config, load_settings
from loadtest.context import ChatRunContext, attach_context, get_context
from loadtest.metrics import SUCCESS_METRIC
from loadtest.queries import load_query_pool
from loadtest.summary import attach_threshold_results, build_summary, write_summary
from loadtest.thresholds import all_passed, evaluate_thresholds, load_thresholds

logger = logging.getLogger(__name__)

EXIT_THRESHOLD_BREACH = 1
EXIT_CONFIG_ERROR = 2

# Key under which workers ship chat counters in their stats reports.
METRICS_REPORT_KEY = "chat_metrics"


def on_init(environment, **_kwargs) -> ChatRunContext:
    """
    Validate configuration and attach a fresh :class:`ChatRunContext`.

    Raises:
        SystemExit: With :data:`EXIT_CONFIG_ERROR` when configuration is
            missing or the query pool file is unusable.
    """
    try:
        settings = load_settings(get_config(), host_override=environment.host or None)
        queries = load_query_pool(settings.query_pool_file)
    except (ConfigurationError, OSError, ValueError) as exc:
        logger.error("Missing or invalid Dify application configuration: %s", exc)
        raise SystemExit(EXIT_CONFIG_ERROR) from exc

    if not environment.host:
        environment.host = settings.host
    for user_class in environment.user_classes:
        if not user_class.host:
            user_class.host = settings.host

    logger.info("Chat load test configured for %s with %d queries", settings.host, len(queries))
    context = attach_context(environment, ChatRunContext(settings=settings, queries=queries))
    _register_metric_reporting(environment, context)
    return context


def on_test_start(environment, **_kwargs) -> None:
    context = get_context(environment)
    if context is None:
        return
    context.mark_started()
    logger.info("Chat load test starting against %s", context.settings.host)


def report_metrics(context: ChatRunContext, data: dict) -> None:
    """Attach this worker's chat counters to its stats report."""
    data[METRICS_REPORT_KEY] = context.metrics.drain()


def merge_worker_metrics(context: ChatRunContext, data: dict) -> None:
    """Fold a worker's chat counters into the master's metrics."""
    counts = data.get(METRICS_REPORT_KEY)
    if counts:
        context.metrics.merge(counts)


def _register_metric_reporting(environment, context: ChatRunContext) -> None:
    # These events carry no environment, so bind the context here.
    environment.events.report_to_master.add_listener(
        lambda client_id, data, **_kw: report_metrics(context, data)
    )
    environment.events.worker_report.add_listener(
        lambda client_id, data, **_kw: merge_worker_metrics(context, data)
    )


def on_quitting(environment, **_kwargs) -> None:
    """Write the run summary and fail the process on a threshold breach."""
    if isinstance(environment.runner, WorkerRunner):
        return

    context = get_context(environment)
    if context is None:
        return

    summary = build_summary(
        environment.stats,
        context.metrics,
        host=context.settings.host,
        started_at=context.started_at,
        conversations_in_progress=context.sessions.conversations_in_progress(),
    )

    try:
        thresholds = load_thresholds(context.settings.thresholds_path)
    except (OSError, ValueError) as exc:
        logger.error("Could not load thresholds from %s: %s", context.settings.thresholds_path, exc)
    else:
        results = evaluate_thresholds(summary, thresholds)
        attach_threshold_results(summary, results)
        for result in results:
            if not result.passed:
                logger.error(
                    "Threshold %s breached: actual %.4f, limit %.4f",
                    result.name,
                    result.actual,
                    result.limit,
                )
        if not all_passed(results):
            environment.process_exit_code = EXIT_THRESHOLD_BREACH

    try:
        write_summary(context.settings.summary_path, summary)
    except OSError as exc:
        logger.error("Could not write run summary to %s: %s", context.settings.summary_path, exc)

    logger.info(
        "Test complete. Successful chat interactions: %d",
        summary["custom_metrics"][SUCCESS_METRIC]["count"],
    )
