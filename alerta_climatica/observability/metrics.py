"""
Metrics definitions for Alerta Climática.

This module defines Prometheus metrics for monitoring
the message processing pipeline.
"""

from prometheus_client import Counter, Histogram, Gauge

# 카운터 메트릭
messages_submitted = Counter(
    "messages_submitted_total",
    "Number of field messages accepted into the dispatch queue",
    ["source"]
)

alerts_classified = Counter(
    "alerts_classified_total",
    "Number of alerts produced by the workers",
    ["type", "severity"]
)

alert_persist_failures = Counter(
    "alert_persist_failures_total",
    "Alerts accepted in memory but not written to the durable store"
)

store_read_failures = Counter(
    "store_read_failures_total",
    "Durable store reads that fell back to the in-memory history"
)

delivery_failures = Counter(
    "alert_delivery_failures_total",
    "Alerts whose delivery callback raised inside a worker"
)

# 히스토그램 메트릭
classify_seconds = Histogram(
    "classify_duration_seconds",
    "Time spent matching hazard patterns",
    buckets=[0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05]
)

end_to_end_seconds = Histogram(
    "end_to_end_duration_seconds",
    "Latency from message receipt to alert acceptance",
    buckets=[0.001, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0]
)

# 게이지 메트릭
queue_depth = Gauge(
    "dispatch_queue_depth",
    "Current depth of the dispatch queue"
)

history_size = Gauge(
    "alert_history_size",
    "Alerts currently held in the in-memory history"
)

workers_running = Gauge(
    "workers_running",
    "Worker tasks currently draining the dispatch queue"
)
