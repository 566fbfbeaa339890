"""ScalingContext — design units to viewport pixels.

All tuning values are authored against a fixed 960x540 design viewport.
The scale factor is ``viewport.width / design.width``; distances and
speeds are multiplied by it on the way in.  Actor sizes (base, enemies,
projectiles, tower range) additionally go through ``ACTOR_SCALE`` so the
playfield reads well at the design size.
"""

from __future__ import annotations

from dataclasses import dataclass

DESIGN_WIDTH = 960.0
DESIGN_HEIGHT = 540.0

# Extra shrink applied to actor metrics (radii, tower range)
ACTOR_SCALE = 0.5


@dataclass
class ScalingContext:
    """Current viewport size and the scale factor it implies."""

    width: float = DESIGN_WIDTH
    height: float = DESIGN_HEIGHT
    design_width: float = DESIGN_WIDTH
    design_height: float = DESIGN_HEIGHT

    def __post_init__(self) -> None:
        _check_size(self.width, self.height)
        _check_size(self.design_width, self.design_height)

    @property
    def scale(self) -> float:
        return self.width / self.design_width

    def metric(self, value: float) -> float:
        """Convert a design-unit distance or speed to viewport units."""
        return value * self.scale

    def actor_metric(self, value: float) -> float:
        """Convert a design-unit actor size (radius, range) to viewport units."""
        return self.metric(value * ACTOR_SCALE)

    def resize(self, width: float, height: float) -> tuple[float, float]:
        """Set a new viewport size. Returns the (x, y) ratios new/old."""
        _check_size(width, height)
        x_ratio = width / self.width
        y_ratio = height / self.height
        self.width = float(width)
        self.height = float(height)
        return x_ratio, y_ratio

    def size_for_scale(self, factor: float) -> tuple[float, float]:
        """Viewport size that yields *factor*, keeping the design aspect ratio."""
        if factor <= 0:
            raise ValueError(f"scale factor must be positive, got {factor}")
        return self.design_width * factor, self.design_height * factor


def _check_size(width: float, height: float) -> None:
    if width <= 0 or height <= 0:
        raise ValueError(f"viewport size must be positive, got {width}x{height}")
