"""Structured logging for tenancy resolution and policy operations."""

import logging
import uuid
from typing import Any

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the application process."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


class StructuredTenancyLogger:
    """Structured logger for franchise context and policy events."""

    def log_resolution(
        self,
        outcome: str,
        latency_ms: float,
        identity_id: uuid.UUID | None = None,
        franchise_id: uuid.UUID | None = None,
        role: str | None = None,
        error_detail: str | None = None,
    ) -> None:
        """Log the outcome of a franchise context resolution."""
        log_data: dict[str, Any] = {
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
            "identity_id": str(identity_id) if identity_id else None,
            "franchise_id": str(franchise_id) if franchise_id else None,
        }

        if role:
            log_data["role"] = role
        if error_detail:
            log_data["error_detail"] = error_detail

        log_msg = f"Franchise context: {outcome}"

        if outcome == "resolved":
            logger.info(log_msg, extra={"structured": log_data})
        elif outcome == "backend_unavailable":
            logger.error(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})

    def log_policy_run(
        self,
        operation: str,
        franchise_id: uuid.UUID,
        count: int,
        types: list[str] | None = None,
    ) -> None:
        """Log a completed apply/seed run."""
        log_data: dict[str, Any] = {
            "operation": operation,
            "franchise_id": str(franchise_id),
            "count": count,
        }
        if types is not None:
            log_data["types"] = types

        logger.info(
            f"Maintenance policy {operation}: {count} rows", extra={"structured": log_data}
        )
