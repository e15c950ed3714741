"""Size-based log rotation with timestamped, gzip-compressed backups.

Built on ``logging.handlers.RotatingFileHandler``: the stdlib handler decides
when to roll over and holds the handler lock while writing, this subclass
changes what a rollover does.

Backups are named ``<stem>-<UTC time><ext>[.gz]`` next to the active file,
e.g. ``adaptive-2024-05-01T10-20-30.123.log.gz``. After each rollover they are
pruned by age (``max_age_days``) and count (``max_backups``); 0 disables the
respective rule.
"""

from __future__ import annotations

import gzip
import logging
import os
import shutil
from datetime import datetime, timedelta, timezone
from logging.handlers import RotatingFileHandler

MEGABYTE = 1024 * 1024
BACKUP_TIME_FORMAT = "%Y-%m-%dT%H-%M-%S.%f"

logger = logging.getLogger("hooksink.rotation")


def _now() -> datetime:
    return datetime.now(timezone.utc)


class CompressingRotatingFileHandler(RotatingFileHandler):
    def __init__(
        self,
        filename: str,
        *,
        max_bytes: int = 10 * MEGABYTE,
        max_backups: int = 3,
        max_age_days: int = 28,
        compress: bool = True,
        encoding: str = "utf-8",
    ) -> None:
        filename = os.path.abspath(filename)
        os.makedirs(os.path.dirname(filename), exist_ok=True)
        super().__init__(filename, mode="a", maxBytes=max_bytes, backupCount=max_backups, encoding=encoding)
        self.max_age_days = max_age_days
        self.compress = compress
        if compress:
            self.namer = lambda name: name + ".gz"
            self.rotator = self._gzip_rotator
        self._last_rollover: datetime | None = None

        directory, base = os.path.split(self.baseFilename)
        self._dir = directory
        self._stem, self._ext = os.path.splitext(base)

    def handleError(self, record: logging.LogRecord) -> None:
        # Called from inside emit()'s except block: surface the failure to the caller.
        raise

    def shouldRollover(self, record: logging.LogRecord) -> bool:
        if self.stream is None:
            self.stream = self._open()
        if self.maxBytes <= 0:
            return False
        self.stream.seek(0, 2)
        size = self.stream.tell()
        if size == 0:
            # an entry larger than the threshold still gets written, alone, to a fresh file
            return False
        entry = (self.format(record) + self.terminator).encode(self.encoding or "utf-8", "replace")
        return size + len(entry) > self.maxBytes

    def doRollover(self) -> None:
        if self.stream:
            self.stream.close()
            self.stream = None

        now = self._rollover_time()
        if os.path.exists(self.baseFilename) and os.path.getsize(self.baseFilename) > 0:
            dest = self.rotation_filename(self.backup_path(now))
            self.rotate(self.baseFilename, dest)
            logger.debug("log_rotated", extra={"backup": dest})
        self.prune(now)

        if not self.delay:
            self.stream = self._open()

    def backup_path(self, ts: datetime) -> str:
        stamp = ts.strftime(BACKUP_TIME_FORMAT)[:-3]  # milliseconds
        return os.path.join(self._dir, f"{self._stem}-{stamp}{self._ext}")

    def backups(self) -> list[tuple[datetime, str]]:
        """Rotated siblings of the active file, newest first."""
        prefix = f"{self._stem}-"
        out: list[tuple[datetime, str]] = []
        for name in os.listdir(self._dir):
            if not name.startswith(prefix):
                continue
            rest = name[len(prefix):]
            for suffix in (self._ext + ".gz", self._ext):
                if rest.endswith(suffix):
                    stamp = rest[: len(rest) - len(suffix)]
                    break
            else:
                continue
            try:
                ts = datetime.strptime(stamp, BACKUP_TIME_FORMAT).replace(tzinfo=timezone.utc)
            except ValueError:
                continue
            out.append((ts, os.path.join(self._dir, name)))
        out.sort(key=lambda b: b[0], reverse=True)
        return out

    def prune(self, now: datetime | None = None) -> list[str]:
        now = now or _now()
        keep = self.backups()
        remove: list[str] = []

        if self.max_age_days > 0:
            cutoff = now - timedelta(days=self.max_age_days)
            remove.extend(path for ts, path in keep if ts < cutoff)
            keep = [(ts, path) for ts, path in keep if ts >= cutoff]

        if self.backupCount > 0:
            remove.extend(path for _, path in keep[self.backupCount:])

        for path in remove:
            try:
                os.remove(path)
            except FileNotFoundError:
                continue
            logger.debug("log_backup_removed", extra={"backup": path})
        return remove

    def _rollover_time(self) -> datetime:
        # Keep backup names unique and ordered even for back-to-back rollovers.
        now = _now()
        now = now.replace(microsecond=now.microsecond // 1000 * 1000)
        if self._last_rollover is not None and now <= self._last_rollover:
            now = self._last_rollover + timedelta(milliseconds=1)
        self._last_rollover = now
        return now

    @staticmethod
    def _gzip_rotator(source: str, dest: str) -> None:
        raw = dest[: -len(".gz")]
        os.rename(source, raw)
        with open(raw, "rb") as src, gzip.open(dest, "wb") as dst:
            shutil.copyfileobj(src, dst)
        os.remove(raw)
