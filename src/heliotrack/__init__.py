# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
heliotrack

Kinematic propagation of coronal mass ejections from DONKI catalog
records, driven by a virtual timeline. Includes record normalization,
constant-speed and decelerating front models, circular-orbit Earth
intersection, storm-linked or extrapolated Earth arrival prediction,
a scrubber-based playback clock, and single-event/timeline focus
control behind one session command surface.
"""

from heliotrack.domain.heliosphere import (
    AU_KM,
    angular_separation_deg,
    earth_heliocentric_longitude_deg,
)
from heliotrack.domain.cme import (
    ArrivalSource,
    CmeEvent,
    CmeFilter,
)
from heliotrack.domain.normalizer import (
    NormalizerConfig,
    normalize_record,
    normalize_records,
)
from heliotrack.domain.propagation import (
    KinematicState,
    PropagationConfig,
    distance_au_at,
    propagate,
    speed_at,
)
from heliotrack.domain.arrival import (
    ArrivalConfig,
    ArrivalPrediction,
    predict_arrival,
)
from heliotrack.domain.timeline import (
    PlayState,
    TimeRange,
    TimelineConfig,
    TimelineState,
    VirtualClock,
    default_window,
)
from heliotrack.domain.focus import (
    FocusController,
    FocusMode,
    FocusState,
)
from heliotrack.domain.session import (
    CmeProjection,
    FrameSnapshot,
    ModelerConfig,
    ModelerSession,
    sample_frames,
)

__version__ = "0.1.0"

__all__ = [
    "AU_KM",
    "angular_separation_deg",
    "earth_heliocentric_longitude_deg",
    "ArrivalSource",
    "CmeEvent",
    "CmeFilter",
    "NormalizerConfig",
    "normalize_record",
    "normalize_records",
    "KinematicState",
    "PropagationConfig",
    "distance_au_at",
    "propagate",
    "speed_at",
    "ArrivalConfig",
    "ArrivalPrediction",
    "predict_arrival",
    "PlayState",
    "TimeRange",
    "TimelineConfig",
    "TimelineState",
    "VirtualClock",
    "default_window",
    "FocusController",
    "FocusMode",
    "FocusState",
    "CmeProjection",
    "FrameSnapshot",
    "ModelerConfig",
    "ModelerSession",
    "sample_frames",
]
