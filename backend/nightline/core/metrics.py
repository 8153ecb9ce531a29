"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Auth metrics
login_attempts = Counter(
    'nightline_login_attempts_total',
    'Total login attempts',
    ['result']  # success, failure
)

authorization_denials = Counter(
    'nightline_authorization_denials_total',
    'Requests rejected by the role-permission model',
    ['capability']
)

# Lifecycle metrics
event_status_transitions = Counter(
    'nightline_event_status_transitions_total',
    'Event status writes',
    ['from_status', 'to_status']
)

ticket_status_transitions = Counter(
    'nightline_ticket_status_transitions_total',
    'Support ticket status writes',
    ['to_status', 'trigger']  # trigger: user_reply, admin_reply, admin_status
)

# Cache metrics
cache_operations = Counter(
    'nightline_cache_operations_total',
    'Cache operations',
    ['operation', 'result']
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_login(success: bool):
    result = "success" if success else "failure"
    login_attempts.labels(result=result).inc()


def record_authorization_denial(capability: str):
    authorization_denials.labels(capability=capability).inc()


def record_event_transition(from_status: str, to_status: str):
    event_status_transitions.labels(from_status=from_status, to_status=to_status).inc()


def record_ticket_transition(to_status: str, trigger: str):
    """Record ticket status write. Trigger: user_reply, admin_reply, admin_status"""
    ticket_status_transitions.labels(to_status=to_status, trigger=trigger).inc()


def record_cache_operation(operation: str, result: str):
    """operation: get, set, invalidate. result: hit, miss, ok, error"""
    cache_operations.labels(operation=operation, result=result).inc()
