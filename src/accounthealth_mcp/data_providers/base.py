"""Base AccountDataProvider interface and snapshot collection."""

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from accounthealth_mcp.data_providers.normalizer import normalize_snapshot
from accounthealth_mcp.models.snapshot import AccountSnapshot, DataSource, FetchError

logger = logging.getLogger(__name__)

Records = list[Any]


class AccountDataProvider(ABC):
    """Interface for providers that fetch the twelve account collections.

    Each method returns a list of records (mappings in the upstream camelCase
    shape or already-typed models). A method may raise; ``collect_snapshot``
    turns the failure into a ``FetchError`` for that source only.
    """

    @abstractmethod
    async def get_campaigns(
        self, customer_id: str, start_date: datetime, end_date: datetime
    ) -> Records:
        """Fetch campaigns with performance and impression share."""
        pass

    @abstractmethod
    async def get_ad_groups(
        self, customer_id: str, start_date: datetime, end_date: datetime
    ) -> Records:
        """Fetch ad groups with performance."""
        pass

    @abstractmethod
    async def get_keywords(
        self, customer_id: str, start_date: datetime, end_date: datetime
    ) -> Records:
        """Fetch keywords with quality score components."""
        pass

    @abstractmethod
    async def get_ads(
        self, customer_id: str, start_date: datetime, end_date: datetime
    ) -> Records:
        """Fetch ads with ad strength."""
        pass

    @abstractmethod
    async def get_negative_keywords(
        self, customer_id: str, start_date: datetime, end_date: datetime
    ) -> Records:
        """Fetch ad group, campaign and shared-list negatives."""
        pass

    @abstractmethod
    async def get_search_terms(
        self, customer_id: str, start_date: datetime, end_date: datetime
    ) -> Records:
        """Fetch the search terms report."""
        pass

    @abstractmethod
    async def get_auction_insights(
        self, customer_id: str, start_date: datetime, end_date: datetime
    ) -> Records:
        """Fetch auction insight rows."""
        pass

    @abstractmethod
    async def get_device_stats(
        self, customer_id: str, start_date: datetime, end_date: datetime
    ) -> Records:
        """Fetch performance segmented by device."""
        pass

    @abstractmethod
    async def get_asset_performance(
        self, customer_id: str, start_date: datetime, end_date: datetime
    ) -> Records:
        """Fetch asset labels and approval status."""
        pass

    @abstractmethod
    async def get_change_events(
        self, customer_id: str, start_date: datetime, end_date: datetime
    ) -> Records:
        """Fetch change history."""
        pass

    @abstractmethod
    async def get_conversion_actions(
        self, customer_id: str, start_date: datetime, end_date: datetime
    ) -> Records:
        """Fetch conversion action configuration."""
        pass

    @abstractmethod
    async def get_pmax_products(
        self, customer_id: str, start_date: datetime, end_date: datetime
    ) -> Records:
        """Fetch Performance Max product performance."""
        pass


async def _fetch_source(
    provider: AccountDataProvider,
    source: DataSource,
    customer_id: str,
    start_date: datetime,
    end_date: datetime,
) -> Records | FetchError:
    fetch = getattr(provider, f"get_{source.value}")
    try:
        return await fetch(customer_id, start_date, end_date)
    except Exception as e:
        logger.warning(
            f"Failed to fetch {source.value}: {type(e).__name__}: {e}",
            extra={"source": source.value, "customer_id": customer_id},
        )
        return FetchError.from_exception(source.value, e)


async def collect_snapshot(
    provider: AccountDataProvider,
    customer_id: str,
    start_date: datetime,
    end_date: datetime,
) -> AccountSnapshot:
    """Fetch every source concurrently and normalize the results.

    Sources fail independently: a failing fetch is logged and recorded as a
    ``FetchError`` so evaluators report it as unavailable rather than empty.

    Returns:
        Normalized AccountSnapshot
    """
    sources = list(DataSource)
    results = await asyncio.gather(
        *(
            _fetch_source(provider, source, customer_id, start_date, end_date)
            for source in sources
        )
    )
    collections = {source.value: result for source, result in zip(sources, results)}
    failed = [name for name, r in collections.items() if isinstance(r, FetchError)]
    if failed:
        logger.warning(
            f"Collected snapshot with {len(failed)} unavailable sources: "
            f"{', '.join(failed)}",
            extra={"customer_id": customer_id},
        )
    return normalize_snapshot(**collections)
