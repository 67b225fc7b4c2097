from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError

from satsforex.config.settings import SnapshotSettings, settings
from satsforex.schemas.feeds import DOMAINS, Domain, Snapshot, SnapshotStatus, now_ms

logger = structlog.get_logger()


class SnapshotStore:
    """Last-known-good payload per feed domain, one JSON document each.

    Writes go to a temp file in the same directory and are moved into place
    with ``os.replace``, so a reader sees either the previous snapshot or the
    new one. Missing or unreadable files read as ``None``.
    """

    def __init__(self, snapshot_settings: SnapshotSettings | None = None, directory: str | Path | None = None) -> None:
        self.settings = snapshot_settings or settings.snapshots
        self.directory = Path(directory or self.settings.directory)
        self._locks: dict[str, threading.Lock] = {domain: threading.Lock() for domain in DOMAINS}

    def path_for(self, domain: Domain) -> Path:
        return self.directory / f"{domain}_snapshot.json"

    def stale_after_seconds(self, domain: Domain) -> int:
        if domain == "price":
            return self.settings.price_stale_after_seconds
        return self.settings.gdp_stale_after_seconds

    def write(
        self,
        domain: Domain,
        data: dict[str, Any],
        year: str | None = None,
        source: str = "unknown",
        timestamp: int | None = None,
    ) -> Snapshot | None:
        snapshot = Snapshot(
            domain=domain,
            timestamp=timestamp if timestamp is not None else now_ms(),
            year=year,
            source=source,
            data=data,
        )
        path = self.path_for(domain)
        with self._locks[domain]:
            try:
                self._write_atomic(path, snapshot.model_dump())
            except (OSError, TypeError, ValueError) as exc:
                logger.error("snapshot_write_failed", domain=domain, path=str(path), error=str(exc))
                return None
        logger.info(
            "snapshot_written",
            domain=domain,
            path=str(path),
            year=year,
            records=len(data),
        )
        return snapshot

    def read(self, domain: Domain) -> Snapshot | None:
        path = self.path_for(domain)
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.error("snapshot_read_failed", domain=domain, path=str(path), error=str(exc))
            return None

        try:
            payload = json.loads(raw.decode("utf-8"))
            if isinstance(payload, dict):
                payload.setdefault("domain", domain)
            snapshot = Snapshot.model_validate(payload)
        except (UnicodeDecodeError, json.JSONDecodeError, ValidationError) as exc:
            logger.error("snapshot_corrupt", domain=domain, path=str(path), error=str(exc))
            return None

        if snapshot.domain != domain:
            logger.error("snapshot_domain_mismatch", domain=domain, found=snapshot.domain)
            return None
        return snapshot

    def is_stale(self, snapshot: Snapshot, now: int | None = None) -> bool:
        return snapshot.is_stale(self.stale_after_seconds(snapshot.domain), now)

    def status(self, now: int | None = None) -> list[SnapshotStatus]:
        statuses: list[SnapshotStatus] = []
        for domain in DOMAINS:
            snapshot = self.read(domain)
            if snapshot is None:
                statuses.append(SnapshotStatus(domain=domain, exists=False))
                continue
            statuses.append(
                SnapshotStatus(
                    domain=domain,
                    exists=True,
                    timestamp=snapshot.timestamp,
                    year=snapshot.year,
                    age_seconds=snapshot.age_seconds(now),
                    stale=self.is_stale(snapshot, now),
                )
            )
        return statuses

    def prime(
        self,
        domain: Domain,
        data: dict[str, Any],
        year: str | None = None,
        source: str = "primed",
        overwrite: bool = False,
    ) -> Snapshot | None:
        """Seed a snapshot; an existing one is kept unless ``overwrite`` is set."""
        existing = None if overwrite else self.read(domain)
        if existing is not None:
            logger.info("snapshot_prime_skipped", domain=domain, timestamp=existing.timestamp)
            return existing
        return self.write(domain, data, year=year, source=source)

    def _write_atomic(self, path: Path, document: dict[str, Any]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.tmp.",
            delete=False,
        ) as handle:
            tmp_path = Path(handle.name)
            try:
                json.dump(document, handle, ensure_ascii=False, allow_nan=False)
                handle.flush()
                os.fsync(handle.fileno())
            except (OSError, TypeError, ValueError):
                handle.close()
                tmp_path.unlink(missing_ok=True)
                raise
        try:
            os.replace(tmp_path, path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise
