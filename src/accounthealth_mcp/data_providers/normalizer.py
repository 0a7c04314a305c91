"""Normalize raw upstream collections into an AccountSnapshot.

Every collection may arrive as a list of mappings (camelCase or snake_case),
a list of already-typed models, a pandas DataFrame, ``None`` or a
``FetchError``. Unusable records are dropped and counted; nothing here raises
on malformed data.
"""

import logging
from typing import Any, Iterable, Mapping

import pandas as pd
from pydantic import BaseModel, ValidationError

from accounthealth_mcp.models.ad import Ad
from accounthealth_mcp.models.ad_group import AdGroup
from accounthealth_mcp.models.asset import AssetPerformance
from accounthealth_mcp.models.auction_insight import AuctionInsightRow
from accounthealth_mcp.models.campaign import Campaign
from accounthealth_mcp.models.change_event import ChangeEvent
from accounthealth_mcp.models.conversion_action import ConversionAction
from accounthealth_mcp.models.device import DeviceStat
from accounthealth_mcp.models.keyword import Keyword, NegativeKeyword
from accounthealth_mcp.models.product import PMaxProduct
from accounthealth_mcp.models.search_term import SearchTerm
from accounthealth_mcp.models.snapshot import AccountSnapshot, DataSource, FetchError

logger = logging.getLogger(__name__)

SOURCE_MODELS: dict[DataSource, type[BaseModel]] = {
    DataSource.CAMPAIGNS: Campaign,
    DataSource.AD_GROUPS: AdGroup,
    DataSource.KEYWORDS: Keyword,
    DataSource.ADS: Ad,
    DataSource.NEGATIVE_KEYWORDS: NegativeKeyword,
    DataSource.SEARCH_TERMS: SearchTerm,
    DataSource.AUCTION_INSIGHTS: AuctionInsightRow,
    DataSource.DEVICE_STATS: DeviceStat,
    DataSource.ASSET_PERFORMANCE: AssetPerformance,
    DataSource.CHANGE_EVENTS: ChangeEvent,
    DataSource.CONVERSION_ACTIONS: ConversionAction,
    DataSource.PMAX_PRODUCTS: PMaxProduct,
}


def _iter_records(raw: Any) -> tuple[list[Any], int]:
    """Turn a collection input into a list of candidate records.

    Returns:
        (records, skipped) where skipped counts inputs that were not iterable
    """
    if raw is None:
        return [], 0
    if isinstance(raw, pd.DataFrame):
        return raw.to_dict(orient="records"), 0
    if isinstance(raw, (str, bytes, Mapping)) or not isinstance(raw, Iterable):
        return [], 1
    return list(raw), 0


def normalize_collection(
    source: DataSource | str, raw: Any
) -> tuple[list[Any], int]:
    """Validate one collection into its typed model.

    Args:
        source: Which collection ``raw`` holds
        raw: List of mappings/models, a DataFrame, or None

    Returns:
        (typed records, number of records skipped)
    """
    model = SOURCE_MODELS[DataSource(source)]
    candidates, skipped = _iter_records(raw)
    records: list[Any] = []

    for item in candidates:
        if isinstance(item, model):
            records.append(item)
            continue
        if isinstance(item, BaseModel):
            item = item.model_dump()
        if not isinstance(item, Mapping):
            skipped += 1
            continue
        try:
            records.append(model.model_validate(dict(item)))
        except ValidationError as e:
            logger.debug(f"Dropping unusable {DataSource(source).value} record: {e}")
            skipped += 1

    return records, skipped


def normalize_snapshot(
    campaigns: Any = None,
    ad_groups: Any = None,
    keywords: Any = None,
    ads: Any = None,
    negative_keywords: Any = None,
    search_terms: Any = None,
    auction_insights: Any = None,
    device_stats: Any = None,
    asset_performance: Any = None,
    change_events: Any = None,
    conversion_actions: Any = None,
    pmax_products: Any = None,
) -> AccountSnapshot:
    """Normalize all twelve collections into one AccountSnapshot.

    A ``FetchError`` (or an exception instance) in place of a collection marks
    that source as unavailable; its collection is left empty.

    Returns:
        AccountSnapshot with typed collections and availability metadata
    """
    inputs = {
        DataSource.CAMPAIGNS: campaigns,
        DataSource.AD_GROUPS: ad_groups,
        DataSource.KEYWORDS: keywords,
        DataSource.ADS: ads,
        DataSource.NEGATIVE_KEYWORDS: negative_keywords,
        DataSource.SEARCH_TERMS: search_terms,
        DataSource.AUCTION_INSIGHTS: auction_insights,
        DataSource.DEVICE_STATS: device_stats,
        DataSource.ASSET_PERFORMANCE: asset_performance,
        DataSource.CHANGE_EVENTS: change_events,
        DataSource.CONVERSION_ACTIONS: conversion_actions,
        DataSource.PMAX_PRODUCTS: pmax_products,
    }

    collections: dict[str, list[Any]] = {}
    unavailable: dict[str, str] = {}
    skipped: dict[str, int] = {}

    for source, raw in inputs.items():
        name = source.value
        if isinstance(raw, BaseException):
            raw = FetchError.from_exception(name, raw)
        if isinstance(raw, FetchError):
            unavailable[name] = raw.message
            collections[name] = []
            logger.warning(f"Source '{name}' unavailable: {raw.message}")
            continue

        records, dropped = normalize_collection(source, raw)
        collections[name] = records
        if dropped:
            skipped[name] = dropped
            logger.warning(
                f"Skipped {dropped} unusable record(s) in '{name}' "
                f"({len(records)} kept)"
            )

    snapshot = AccountSnapshot(**collections, unavailable=unavailable, skipped=skipped)
    logger.debug(f"Normalized snapshot record counts: {snapshot.record_counts()}")
    return snapshot
