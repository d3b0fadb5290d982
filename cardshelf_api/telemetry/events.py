"""
Telemetry Event Names

Centralized event name constants following the naming convention:
{domain}_{entity}_{action}
"""


class TelemetryEvents:
    """Centralized telemetry event names."""

    # Request lifecycle
    REQUEST_RECEIVED = "request_received"
    REQUEST_COMPLETED = "request_completed"
    REQUEST_FAILED = "request_failed"

    # Authentication
    AUTHENTICATION_SUCCEEDED = "authentication_succeeded"
    AUTHENTICATION_FAILED = "authentication_failed"
    AUTHENTICATION_DOWNGRADED = "authentication_downgraded"

    # Identity
    USER_MATERIALIZED = "user_materialized"
    HANDLE_CLAIMED = "handle_claimed"
    HANDLE_CONFLICT = "handle_conflict"

    # Owner resolution
    OWNER_RESOLVED = "owner_resolved"
    OWNER_NOT_FOUND = "owner_not_found"

    # Collection
    CARD_CREATED = "card_created"
    CARD_UPDATED = "card_updated"
    CARD_DELETED = "card_deleted"
    CATEGORY_CREATED = "category_created"
    CATEGORY_UPDATED = "category_updated"
    CATEGORY_DELETED = "category_deleted"

    # Errors
    DATABASE_ERROR = "database_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"

    # Application lifecycle
    APP_STARTED = "app_started"
    APP_STOPPED = "app_stopped"
