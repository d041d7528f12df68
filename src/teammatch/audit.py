"""Append-only audit log of dispatched tool calls."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable

from .schemas import ToolCallRecord


class AuditLogger:
    """Append-only audit logger writing JSON lines."""

    def __init__(self, path: Path):
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, record: ToolCallRecord, **context: str | None) -> None:
        entry = {**{k: v for k, v in context.items() if v is not None}, **record.model_dump(mode="json")}
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(entry, ensure_ascii=False))
            handle.write("\n")

    def extend(self, records: Iterable[ToolCallRecord], **context: str | None) -> None:
        for record in records:
            self.append(record, **context)
