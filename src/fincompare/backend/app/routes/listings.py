"""Endpoints serving cached listing data and the aggregate freshness view."""

from __future__ import annotations

import asyncio
from typing import Any

from flask import Blueprint, current_app, jsonify, request

from fincompare.backend.app.http import not_found
from fincompare.backend.app.services.listings import ListingsContext

blueprint = Blueprint("listings", __name__, url_prefix="/api/v1/listings")

EXTENSION_KEY = "fincompare.listings"

_TRUTHY = {"1", "true", "yes", "on"}


def get_listings_context() -> ListingsContext:
    return current_app.extensions[EXTENSION_KEY]


@blueprint.get("")
def get_all_listings() -> Any:
    """Load every source (cache permitting) and return the combined view."""

    aggregate = get_listings_context().aggregate
    asyncio.run(aggregate.load_all())
    return jsonify(aggregate.snapshot())


@blueprint.post("/refresh")
def refresh_all_listings() -> Any:
    """Bypass the cache for every source and return the combined view."""

    aggregate = get_listings_context().aggregate
    asyncio.run(aggregate.refresh_all())
    return jsonify(aggregate.snapshot())


@blueprint.get("/cache")
def get_cache_status() -> Any:
    cache = get_listings_context().cache
    return jsonify(
        {
            "validity_seconds": int(cache.validity_window.total_seconds()),
            "entries": cache.status(),
        }
    )


@blueprint.get("/<source>")
def get_listing(source: str) -> Any:
    """Return one source; ``?refresh=1`` forces a refetch."""

    context = get_listings_context()
    try:
        fetcher = context.fetcher(source)
    except KeyError:
        return not_found(
            "listing source", source, available=sorted(context.aggregate.fetchers)
        ).to_response()

    force_refresh = request.args.get("refresh", "").strip().lower() in _TRUTHY
    state = asyncio.run(fetcher.load(force_refresh=force_refresh))
    return jsonify(state.as_dict())
