"""Seed the GDP snapshot so a cold start can rank fiat currencies.

Usage:
    python -m satsforex.prime
    python -m satsforex.prime --overwrite --directory /tmp/cache
"""
from __future__ import annotations

import argparse

import structlog

from satsforex.config.logging import setup_logging
from satsforex.snapshots import SnapshotStore

logger = structlog.get_logger()

PRIME_YEAR = "2024"

# Nominal GDP in billions of USD, IMF World Economic Outlook.
PRIME_GDP: dict[str, float] = {
    "USA": 29167.78,
    "CHN": 18273.36,
    "JPN": 4070.09,
    "DEU": 4710.03,
    "IND": 3889.13,
    "GBR": 3587.55,
    "FRA": 3174.10,
    "BRA": 2188.42,
    "RUS": 2184.32,
    "ITA": 2376.51,
    "CAN": 2214.80,
    "KOR": 1869.92,
    "AUS": 1802.01,
    "ESP": 1731.47,
    "MEX": 1848.13,
    "IDN": 1402.59,
    "NLD": 1218.40,
    "SAU": 1100.71,
    "CHE": 942.26,
    "TWN": 775.02,
    "POL": 862.91,
    "TUR": 1344.32,
    "IRN": 434.24,
    "THA": 528.92,
    "HKG": 401.75,
    "ZAF": 403.05,
    "ISR": 528.07,
    "SGP": 530.71,
    "PHL": 470.06,
    "MYS": 439.75,
    "IRQ": 264.15,
}


def prime_gdp(store: SnapshotStore | None = None, overwrite: bool = False):
    store = store or SnapshotStore()
    snapshot = store.prime("gdp", dict(PRIME_GDP), year=PRIME_YEAR, overwrite=overwrite)
    if snapshot is not None:
        logger.info(
            "gdp_snapshot_primed",
            path=str(store.path_for("gdp")),
            countries=len(snapshot.data),
            source=snapshot.source,
        )
    return snapshot


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Prime the GDP snapshot")
    parser.add_argument("--directory", help="Snapshot directory (defaults to settings)")
    parser.add_argument(
        "--overwrite",
        action="store_true",
        help="Replace an existing GDP snapshot",
    )
    args = parser.parse_args(argv)

    setup_logging()
    store = SnapshotStore(directory=args.directory)
    return 0 if prime_gdp(store, overwrite=args.overwrite) is not None else 1


if __name__ == "__main__":
    raise SystemExit(main())
