"""Static fixed-deposit listing used while the remote store is unavailable."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from flask import Blueprint, jsonify

blueprint = Blueprint("mock_data", __name__, url_prefix="/api")

MOCK_FIXED_DEPOSITS: tuple[dict[str, Any], ...] = (
    {
        "id": 1,
        "bank": "Maybank",
        "productName": "Maybank Fixed Deposit-i",
        "interestRate": 3.85,
        "tenure": "12M",
        "minDeposit": 1000,
        "islamic": True,
        "features": ["Shariah-compliant", "Auto-renewal option", "Partial withdrawal"],
        "terms": "Minimum deposit of RM1,000. Early withdrawal penalties apply.",
        "affiliateUrl": "https://maybank.com/fd",
    },
)


@blueprint.get("/fixed-deposits")
def list_mock_fixed_deposits() -> Any:
    """Return the fixed mock deposits stamped with the current time."""

    last_updated = datetime.now(timezone.utc).isoformat()
    return jsonify([{**deposit, "lastUpdated": last_updated} for deposit in MOCK_FIXED_DEPOSITS])
