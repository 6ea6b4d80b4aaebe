# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Adapters for catalog input and frame export.

External dependencies (json, csv, file I/O) are confined to this layer.
"""
from heliotrack.adapters.json_catalog import JsonCatalogReader
from heliotrack.adapters.csv_exporter import CsvFrameExporter
from heliotrack.adapters.json_exporter import JsonFrameExporter, frame_to_dict

__all__ = [
    "JsonCatalogReader",
    "CsvFrameExporter",
    "JsonFrameExporter",
    "frame_to_dict",
]
