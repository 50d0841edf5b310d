from __future__ import annotations

import json
import logging
import os
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from rasoi_revive.config import Settings

logger = logging.getLogger(__name__)

_write_lock = threading.Lock()


class MetricsLogger:
    """Append-only JSONL logger for latency metrics under data/.

    Writes one JSON object per line with fields:
      - ts: ISO timestamp (UTC)
      - kind: "latency"
      - name: short name ("recipes_generate", "image_generate")
      - duration_ms: float
      - ok: whether the call succeeded
      - extra: optional dict with contextual fields
    """

    def __init__(self, settings: Optional[Settings] = None, filename: str = "latency_log.jsonl") -> None:
        self.settings = settings or Settings()
        self.path = os.path.join(self.settings.data_dir, filename)

    def log_latency(
        self,
        name: str,
        duration_ms: float,
        ok: bool = True,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        entry: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "kind": "latency",
            "name": name,
            "duration_ms": round(float(duration_ms), 3),
            "ok": ok,
        }
        if extra:
            entry["extra"] = extra
        line = json.dumps(entry, ensure_ascii=False, separators=(",", ":")) + "\n"
        try:
            os.makedirs(self.settings.data_dir, exist_ok=True)
            with _write_lock, open(self.path, "a", encoding="utf-8") as f:
                f.write(line)
        except OSError as e:
            # Metrics never affect user flows.
            logger.debug("Could not write latency metric to %s: %s", self.path, e)
