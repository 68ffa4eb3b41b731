"""Global blacklist HTTP client"""

import httpx
from momo_guard.domain.exceptions import BlacklistServiceError
from momo_guard.config import settings
from momo_guard.infrastructure.observability.metrics import enrichment_failures_counter


class BlacklistClient:
    """Client for the shared blacklist of known scam counterparts"""

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        self.base_url = base_url or settings.blacklist_api_base
        self.timeout = timeout or settings.http_timeout_seconds

    async def is_globally_blacklisted(self, identity: str) -> bool:
        """
        Check a counterpart name or number against the global blacklist.

        Raises:
            BlacklistServiceError: On timeout, HTTP errors, or invalid response
        """
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.get(
                    f"{self.base_url}/blacklist/global",
                    params={"identity": identity},
                )
                response.raise_for_status()
                blacklisted = response.json()["blacklisted"]
                if not isinstance(blacklisted, bool):
                    raise TypeError(f"expected bool, got {type(blacklisted).__name__}")
                return blacklisted

            except httpx.TimeoutException as e:
                enrichment_failures_counter.labels(source="blacklist").inc()
                raise BlacklistServiceError(f"Blacklist API timeout after {self.timeout}s") from e
            except httpx.HTTPError as e:
                enrichment_failures_counter.labels(source="blacklist").inc()
                raise BlacklistServiceError(f"Blacklist API error: {e}") from e
            except (KeyError, ValueError, TypeError) as e:
                enrichment_failures_counter.labels(source="blacklist").inc()
                raise BlacklistServiceError(f"Invalid response from blacklist API: {e}") from e
