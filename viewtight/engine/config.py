"""Engine configuration — sampling density and output buffer."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class EngineConfig:
    """Tunables for one envelope run. Larger sample counts tighten nothing but
    reduce the chance of missing an extreme pose between samples."""

    # Viewport padding added on every side of the content envelope
    buffer_px: float = 0.0

    # Intermediate poses between each pair of keyframes
    samples_per_segment: int = 32

    # Points sampled along a motion path
    motion_samples: int = 64

    # Line pieces per curve or arc when flattening paths
    curve_segments: int = 16

    # Rotation/skew sweeps are sampled at least this finely (degrees)
    max_angle_step_deg: float = 2.5

    # Blur extent per standard deviation
    blur_sigma_multiplier: float = 3.0

    # Additive animation groups enumerated on/off individually
    max_event_alternatives: int = 6

    def __post_init__(self) -> None:
        if self.buffer_px < 0:
            raise ValueError(f"buffer_px must be >= 0, got {self.buffer_px}")
        if self.samples_per_segment < 0:
            raise ValueError(f"samples_per_segment must be >= 0, got {self.samples_per_segment}")
        if self.motion_samples < 2:
            raise ValueError(f"motion_samples must be >= 2, got {self.motion_samples}")
        if self.curve_segments < 1:
            raise ValueError(f"curve_segments must be >= 1, got {self.curve_segments}")
        if self.max_angle_step_deg <= 0:
            raise ValueError(f"max_angle_step_deg must be > 0, got {self.max_angle_step_deg}")
        if self.blur_sigma_multiplier < 0:
            raise ValueError("blur_sigma_multiplier must be >= 0")
        if self.max_event_alternatives < 0:
            raise ValueError("max_event_alternatives must be >= 0")
