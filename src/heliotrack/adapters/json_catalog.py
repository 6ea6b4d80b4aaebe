# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
JSON catalog file adapter.

Reads a saved DONKI CME response: either the bare JSON array the API
returns, or an object wrapping it under a "records" key.
"""
import json
import logging
from typing import Any

from heliotrack.ports import CatalogSource

logger = logging.getLogger(__name__)


class JsonCatalogReader(CatalogSource):
    """Reads raw CME records from a JSON file."""

    def __init__(self, path: str) -> None:
        self._path = path

    @property
    def path(self) -> str:
        return self._path

    def load_records(self) -> list[dict[str, Any]]:
        with open(self._path, encoding='utf-8') as f:
            data = json.load(f)

        if isinstance(data, dict):
            data = data.get('records', [])
        if not isinstance(data, list):
            raise ValueError(
                f"Expected a JSON array of CME records in {self._path}, "
                f"got {type(data).__name__}"
            )

        records = [r for r in data if isinstance(r, dict)]
        if len(records) != len(data):
            logger.warning(
                "Ignored %d non-object entries in %s",
                len(data) - len(records), self._path,
            )
        logger.info("Read %d catalog records from %s", len(records), self._path)
        return records
