"""Custom metrics for the bartender service."""

from opentelemetry import metrics

meter = metrics.get_meter("bartender-svc")

chat_request_counter = meter.create_counter(
    name="chat_requests_total",
    description="Chat requests by outcome",
    unit="1",
)

upstream_failure_counter = meter.create_counter(
    name="ai_upstream_failures_total",
    description="Failed calls to generative-AI providers",
    unit="1",
)

upstream_duration_histogram = meter.create_histogram(
    name="ai_upstream_duration_seconds",
    description="Duration of generative-AI provider calls",
    unit="s",
)

reconciliation_counter = meter.create_counter(
    name="inventory_reconciliations_total",
    description="Inventory update directives seen in chat replies, by outcome",
    unit="1",
)

menu_change_counter = meter.create_counter(
    name="menu_changes_total",
    description="Menu publishes, rollbacks and draft saves",
    unit="1",
)

enrichment_counter = meter.create_counter(
    name="inventory_enrichments_total",
    description="Flavor-note enrichment attempts by outcome",
    unit="1",
)


def record_chat_request(outcome: str) -> None:
    """Record a chat request.

    Args:
        outcome: "ok", "inventory_updated" or "upstream_error"
    """
    chat_request_counter.add(1, {"outcome": outcome})


def record_upstream_call(provider: str, duration_seconds: float, success: bool) -> None:
    """Record a generative-AI provider call and its duration."""
    upstream_duration_histogram.record(duration_seconds, {"provider": provider})
    if not success:
        upstream_failure_counter.add(1, {"provider": provider})


def record_reconciliation(outcome: str) -> None:
    """Record an update directive.

    Args:
        outcome: "applied", "no_match" or "malformed"
    """
    reconciliation_counter.add(1, {"outcome": outcome})


def record_menu_change(operation: str) -> None:
    """Record a menu state change, labelled by store operation (e.g. "publish", "retire_item")."""
    menu_change_counter.add(1, {"operation": operation})


def record_enrichment(success: bool) -> None:
    """Record one item's flavor-note enrichment attempt."""
    enrichment_counter.add(1, {"outcome": "success" if success else "failure"})
