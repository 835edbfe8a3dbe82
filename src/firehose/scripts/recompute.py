"""Run the ranking batch jobs from the command line.

Typical usage (from cron or a scheduler):
  firehose-recompute hotness
  firehose-recompute leaderboard
  firehose-recompute all
"""
from __future__ import annotations

import argparse
import logging
import sys

from firehose.core.settings import settings
from firehose.db.session import SessionLocal
from firehose.db.time import now_epoch
from firehose.services.counter_store import get_counter_store
from firehose.services.errors import FirehoseError
from firehose.services.hotness import HotnessParams, recompute_hotness
from firehose.services.leaderboard import LeaderboardCache, refresh_leaderboard_cache

logger = logging.getLogger(__name__)

JOBS = ("hotness", "leaderboard", "all")


def run_hotness() -> int:
    with SessionLocal() as db:
        return recompute_hotness(db, now_epoch(), HotnessParams.from_settings(settings))


def run_leaderboard() -> dict[str, int]:
    cache = LeaderboardCache(
        get_counter_store(),
        ttl_seconds=settings.leaderboard_cache_seconds,
        size=settings.leaderboard_cache_size,
    )
    with SessionLocal() as db:
        return refresh_leaderboard_cache(
            db,
            cache,
            now=now_epoch(),
            window_days=settings.leaderboard_window_days,
        )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Recompute post hotness and the leaderboard cache")
    parser.add_argument("job", choices=JOBS, help="Which batch job to run.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at DEBUG level.")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.job in ("hotness", "all"):
            updated = run_hotness()
            logger.info("Hotness updated for %d posts", updated)
        if args.job in ("leaderboard", "all"):
            sizes = run_leaderboard()
            logger.info("Leaderboard cache refreshed: %s", sizes)
    except FirehoseError as exc:
        logger.error("Recompute failed: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
