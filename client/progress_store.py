"""Local persistence of in-flight uploads so an interrupted run can resume."""
import json
import logging
import os
import time

logger = logging.getLogger(__name__)


class ProgressStore:
    """JSON file mapping a file fingerprint to its open upload.

    Each entry holds the ``uploadId``, the init response (part plan and
    presigned URLs) and the ETags collected so far. Entries older than
    ``max_age`` seconds are ignored, since their presigned URLs have expired.
    """

    def __init__(self, path: str, max_age: float = 50 * 60):
        self.path = path
        self.max_age = max_age

    def _read(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            try:
                return json.load(f)
            except json.JSONDecodeError:
                logger.warning("Ignoring unreadable progress file %s", self.path)
                return {}

    def _write(self, data: dict) -> None:
        tmp = self.path + ".tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f)
        os.replace(tmp, self.path)

    def load(self, fingerprint: str) -> dict | None:
        entry = self._read().get(fingerprint)
        if not entry:
            return None
        if time.time() - entry.get("savedAt", 0) > self.max_age:
            return None
        return entry

    def save(self, fingerprint: str, init: dict, etags: dict) -> None:
        data = self._read()
        data[fingerprint] = {
            "uploadId": init["uploadId"],
            "init": init,
            "etags": {str(k): v for k, v in etags.items()},
            "savedAt": data.get(fingerprint, {}).get("savedAt") or time.time(),
        }
        self._write(data)

    def clear(self, fingerprint: str) -> None:
        data = self._read()
        if data.pop(fingerprint, None) is not None:
            self._write(data)
