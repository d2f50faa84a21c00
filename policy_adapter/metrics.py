"""
Prometheus metrics for the policy adapter.
"""
import time
from contextlib import contextmanager
from prometheus_client import Counter, Histogram, Gauge, CollectorRegistry


class AdapterMetrics:
    """
    Centralized metrics for one policy adapter.
    """

    def __init__(self, registry=None):
        self.registry = registry or CollectorRegistry()

        self.rules_loaded_total = Counter(
            "policy_adapter_rules_loaded_total",
            "Rules decoded into the policy model",
            ["ptype"],
            registry=self.registry,
        )

        self.rules_written_total = Counter(
            "policy_adapter_rules_written_total",
            "Rules inserted into storage",
            ["operation"],
            registry=self.registry,
        )

        self.rules_removed_total = Counter(
            "policy_adapter_rules_removed_total",
            "Rules deleted from storage",
            ["operation"],
            registry=self.registry,
        )

        self.operation_duration = Histogram(
            "policy_adapter_operation_duration_seconds",
            "Adapter operation duration in seconds",
            ["operation"],
            registry=self.registry,
        )

        self.operation_errors_total = Counter(
            "policy_adapter_operation_errors_total",
            "Adapter operations that raised",
            ["operation", "error"],
            registry=self.registry,
        )

        self.filtered = Gauge(
            "policy_adapter_filtered",
            "Whether the last load was filtered (1) or complete (0)",
            registry=self.registry,
        )

    @contextmanager
    def track(self, operation: str):
        """Time an operation and count it as failed if it raises."""
        start = time.perf_counter()
        try:
            yield
        except Exception as e:
            self.operation_errors_total.labels(operation=operation, error=e.__class__.__name__).inc()
            raise
        finally:
            self.operation_duration.labels(operation=operation).observe(time.perf_counter() - start)

    def record_loaded(self, ptype: str):
        self.rules_loaded_total.labels(ptype=ptype).inc()

    def record_written(self, operation: str, count: int):
        self.rules_written_total.labels(operation=operation).inc(count)

    def record_removed(self, operation: str, count: int):
        self.rules_removed_total.labels(operation=operation).inc(count)

    def set_filtered(self, filtered: bool):
        self.filtered.set(1 if filtered else 0)
