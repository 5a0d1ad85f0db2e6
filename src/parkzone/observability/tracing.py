"""MLflow tracing helpers for the policy layer.

Usage:

    from parkzone.observability.tracing import trace, start_span

    @trace(name="recommend_parking", span_type="CHAIN")
    def recommend_parking(...): ...

    with start_span("paid_candidates") as span:
        span.set_inputs({...})

Index queries themselves are not traced; spans wrap the policy decisions
that call them. ``configure_tracing`` is called once at startup.
"""

import logging
from contextlib import contextmanager

import mlflow

logger = logging.getLogger(__name__)


def trace(name: str | None = None, **kwargs):
    """Decorator: wraps a function in an MLflow trace span."""
    return mlflow.trace(name=name, **kwargs) if name else mlflow.trace(**kwargs)


@contextmanager
def start_span(name: str = "span", **kwargs):
    """Context manager: child MLflow span."""
    with mlflow.start_span(name=name, **kwargs) as span:
        yield span


def configure_tracing(tracking_uri: str, experiment_name: str, enabled: bool = True) -> None:
    """Point MLflow at the tracking server, or switch tracing off."""
    if not enabled:
        mlflow.tracing.disable()
        logger.info("MLflow tracing disabled")
        return

    mlflow.set_tracking_uri(tracking_uri)
    mlflow.set_experiment(experiment_name)
    mlflow.config.enable_async_logging()
    logger.info("MLflow tracing enabled: %s", tracking_uri)
