"""History API HTTP client for behavior profiles and recent transaction times"""

import httpx
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import List, Optional
from momo_guard.domain.models import BehaviorProfile
from momo_guard.domain.exceptions import HistoryServiceError
from momo_guard.config import settings
from momo_guard.infrastructure.observability.metrics import enrichment_failures_counter
from momo_guard.utils.date_utils import to_naive_utc


class HistoryClient:
    """Client for the user transaction history service (read-only)"""

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        self.base_url = base_url or settings.history_api_base
        self.timeout = timeout or settings.http_timeout_seconds

    async def get_behavior_profile(self, user_id: str) -> Optional[BehaviorProfile]:
        """
        Fetch the user's behavior profile.

        Returns None for a user with no history yet (404).

        Raises:
            HistoryServiceError: On timeout, HTTP errors, or invalid response
        """
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.get(f"{self.base_url}/users/{user_id}/behavior-profile")
                if response.status_code == 404:
                    return None
                response.raise_for_status()
                data = response.json()

                average = data.get("average_transaction_amount")
                return BehaviorProfile(
                    average_transaction_amount=Decimal(str(average)) if average is not None else None,
                )

            except httpx.TimeoutException as e:
                enrichment_failures_counter.labels(source="history").inc()
                raise HistoryServiceError(f"History API timeout after {self.timeout}s") from e
            except httpx.HTTPError as e:
                enrichment_failures_counter.labels(source="history").inc()
                raise HistoryServiceError(f"History API error: {e}") from e
            except (KeyError, ValueError, TypeError, AttributeError, InvalidOperation) as e:
                enrichment_failures_counter.labels(source="history").inc()
                raise HistoryServiceError(f"Invalid behavior profile from history API: {e}") from e

    async def get_recent_transaction_timestamps(self, user_id: str, since: datetime) -> List[datetime]:
        """
        Fetch timestamps of the user's transactions since the given moment.

        Timestamps come back as naive UTC so they compare against SMS times.

        Raises:
            HistoryServiceError: On timeout, HTTP errors, or invalid response
        """
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.get(
                    f"{self.base_url}/users/{user_id}/transactions/timestamps",
                    params={"since": since.isoformat()},
                )
                response.raise_for_status()
                data = response.json()

                return [to_naive_utc(datetime.fromisoformat(ts)) for ts in data["timestamps"]]

            except httpx.TimeoutException as e:
                enrichment_failures_counter.labels(source="history").inc()
                raise HistoryServiceError(f"History API timeout after {self.timeout}s") from e
            except httpx.HTTPError as e:
                enrichment_failures_counter.labels(source="history").inc()
                raise HistoryServiceError(f"History API error: {e}") from e
            except (KeyError, ValueError, TypeError) as e:
                enrichment_failures_counter.labels(source="history").inc()
                raise HistoryServiceError(f"Invalid transaction timestamps from history API: {e}") from e
