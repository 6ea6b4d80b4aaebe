# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Port interfaces for catalog input and frame output.

Adapters implement these to handle files, feeds and formats; the domain
only ever sees already-fetched records and produces frame snapshots.
"""
from typing import Any, Protocol, runtime_checkable

from heliotrack.domain.session import FrameSnapshot


@runtime_checkable
class CatalogSource(Protocol):
    """Port for obtaining raw CME catalog records."""

    def load_records(self) -> list[dict[str, Any]]:
        """Return raw DONKI-shaped CME records (possibly empty)."""
        ...


@runtime_checkable
class FrameExporter(Protocol):
    """Port for writing sampled timeline frames to a file."""

    def export(self, frames: list[FrameSnapshot], path: str) -> int:
        """
        Export frames to a file.

        Returns:
            Number of rows/records written.
        """
        ...
