"""Prometheus metrics for monitoring reminders, recurring payments, and delivery performance"""

from typing import Dict, Iterable
from prometheus_client import Counter, Histogram
from flus_gateway.domain.models import NotificationRequest
from flus_gateway.domain.notifications import DEFAULT_TRIGGERS

DEFAULT_TRIGGER_IDS = {t.id for t in DEFAULT_TRIGGERS}

# Notification metrics
notification_fired_counter = Counter(
    "flus_notification_fired_total",
    "Reminders fired by the trigger evaluator",
    ["trigger"],  # pattern trigger id, e.g. def0 | def1 | custom
)

notification_skipped_counter = Counter(
    "flus_notification_skipped_total",
    "Triggers skipped during evaluation",
    ["reason"],  # already_fired | unresolvable | out_of_bounds
)

# Recurring metrics
recurring_advance_counter = Counter(
    "flus_recurring_advance_total",
    "Recurring occurrences resolved",
    ["action"],  # paid | skipped
)

# Delivery webhook metrics
delivery_latency_histogram = Histogram(
    "delivery_latency_seconds",
    "Notification delivery webhook response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

delivery_failure_counter = Counter(
    "delivery_failures_total",
    "Failed notification deliveries",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_evaluation(notifications: Iterable[NotificationRequest], skipped: Dict[str, int]) -> None:
    """Record fired and skipped trigger counts for one evaluation pass"""
    for notification in notifications:
        # Built-in defaults keep their id, user-defined triggers collapse to one label
        label = notification.trigger_id if notification.trigger_id in DEFAULT_TRIGGER_IDS else "custom"
        notification_fired_counter.labels(trigger=label).inc()

    for reason, count in skipped.items():
        notification_skipped_counter.labels(reason=reason).inc(count)


def record_advance(mark_paid: bool) -> None:
    recurring_advance_counter.labels(action="paid" if mark_paid else "skipped").inc()
