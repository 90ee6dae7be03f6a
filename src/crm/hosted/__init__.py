"""Hosted backend integration -- client, envelope handling, and table services.

Provides HostedBackendClient (httpx, project id + public key auth) whose
responses are checked uniformly by raise_for_envelope, plus TaskService and
DiscountService for the ``task`` and ``app_discount`` tables.
"""

from src.crm.hosted.client import HostedBackendClient, first_result_data, raise_for_envelope
from src.crm.hosted.discounts import DiscountService
from src.crm.hosted.tasks import TaskService

__all__ = [
    "HostedBackendClient",
    "raise_for_envelope",
    "first_result_data",
    "TaskService",
    "DiscountService",
]
