from __future__ import annotations

import argparse
import logging
import os
import time
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Callable

from backend.core.models import Listing
from backend.core.normalize import row_to_listing, similar_to_record
from backend.core.similarity import DEFAULT_MAX_RESULTS, score_pool
from backend.core.supabase_repo import SupabaseRepo


LOGGER = logging.getLogger(__name__)


def run_similar(
    agency_id: str | None = None,
    limit: int | None = None,
    repo: SupabaseRepo | None = None,
    public: bool = False,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    resolved_limit = limit if limit is not None else _env_int("SIMILAR_MAX_RESULTS", DEFAULT_MAX_RESULTS)
    if resolved_limit <= 0:
        raise ValueError("limit must be a positive integer.")

    repo = repo or SupabaseRepo()
    if public:
        # Portal recommendations span every agency's available inventory.
        fetch = repo.get_available_properties
    else:
        fetch = lambda: repo.get_properties(agency_id)  # noqa: E731
    rows = _fetch_with_retry(fetch, label="properties", sleep=sleep)

    listings: list[Listing] = []
    skipped = 0
    for row in rows:
        listing = row_to_listing(row)
        if listing is None:
            skipped += 1
            continue
        listings.append(listing)
    if skipped:
        LOGGER.warning("Skipped %s property rows without id or with unknown type/operation.", skipped)

    # Each account ranks against its own inventory; the portal pool is shared.
    pools: dict[str | None, list[Listing]] = defaultdict(list)
    for listing in listings:
        pools[None if public else listing.agency_id].append(listing)

    now = datetime.now(timezone.utc)
    written = 0
    for reference in listings:
        pool = pools[None if public else reference.agency_id]
        ranked = score_pool(reference, pool)[:resolved_limit]
        records = [
            similar_to_record(reference, candidate, rank=idx, points=points, computed_at=now)
            for idx, (candidate, points) in enumerate(ranked, start=1)
        ]
        repo.replace_similar_properties(reference.id, records)
        written += len(records)

    LOGGER.info(
        "Similar run completed. scope=%s pools=%s listings=%s skipped=%s rows_written=%s",
        "public" if public else (agency_id or "all"),
        len(pools),
        len(listings),
        skipped,
        written,
    )
    return written


def _fetch_with_retry(
    fetch_func: Callable[[], Any],
    label: str,
    max_attempts: int = 3,
    sleep: Callable[[float], None] = time.sleep,
) -> list[dict[str, Any]]:
    last_error: Exception | None = None
    for attempt in range(1, max_attempts + 1):
        try:
            result = fetch_func()
            return result if isinstance(result, list) else []
        except Exception as exc:  # noqa: BLE001
            last_error = exc
            if attempt >= max_attempts:
                break
            wait_seconds = attempt * 2
            LOGGER.warning(
                "Fetch retry target=%s attempt=%s/%s wait=%ss error=%s",
                label,
                attempt,
                max_attempts,
                wait_seconds,
                exc,
            )
            sleep(wait_seconds)
    if last_error:
        LOGGER.error("Fetch failed target=%s after %s attempts.", label, max_attempts)
        raise last_error
    return []


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except (TypeError, ValueError):
        return default


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    parser = argparse.ArgumentParser(description="Rank and store similar properties for every listing.")
    parser.add_argument("--agency-id", default=None, help="Restrict to one agency's inventory.")
    parser.add_argument("--limit", type=int, default=None, help="Similar properties kept per listing.")
    parser.add_argument("--public", action="store_true", help="Rank across available listings of all agencies.")
    args = parser.parse_args()
    run_similar(agency_id=args.agency_id, limit=args.limit, public=args.public)
