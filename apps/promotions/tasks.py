"""Celery tasks for the promotions domain."""

from __future__ import annotations

from celery import shared_task  # type: ignore

from .services import expire_discounts


@shared_task(name="promotions.deactivate_expired_discounts")
def deactivate_expired_discounts() -> dict[str, int]:
    """Runs daily through Celery Beat."""
    count = expire_discounts()
    return {"deactivated": count}
