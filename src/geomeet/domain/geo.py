"""Geographic value types."""

import math
from dataclasses import dataclass

from geomeet.domain.errors import validation_error

MIN_LATITUDE = -90.0
MAX_LATITUDE = 90.0
MIN_LONGITUDE = -180.0
MAX_LONGITUDE = 180.0


@dataclass(frozen=True)
class Latitude:
    """Latitude in degrees, within [-90, 90]."""

    value: float

    def __post_init__(self) -> None:
        if self.value is None or isinstance(self.value, bool):
            raise validation_error("Latitude is required")
        if not MIN_LATITUDE <= self.value <= MAX_LATITUDE:
            raise validation_error(
                f"Latitude must be between {MIN_LATITUDE:.1f} "
                f"and {MAX_LATITUDE:.1f} degrees"
            )


@dataclass(frozen=True)
class Longitude:
    """Longitude in degrees, within [-180, 180]."""

    value: float

    def __post_init__(self) -> None:
        if self.value is None or isinstance(self.value, bool):
            raise validation_error("Longitude is required")
        if not MIN_LONGITUDE <= self.value <= MAX_LONGITUDE:
            raise validation_error(
                f"Longitude must be between {MIN_LONGITUDE:.1f} "
                f"and {MAX_LONGITUDE:.1f} degrees"
            )


@dataclass(frozen=True)
class Location:
    """Immutable geographic point with optional accuracy in meters."""

    latitude: float
    longitude: float
    accuracy: float | None = None

    def __post_init__(self) -> None:
        Latitude(self.latitude)
        Longitude(self.longitude)
        if self.accuracy is not None and (
            not math.isfinite(self.accuracy) or self.accuracy < 0
        ):
            raise validation_error("Accuracy must be a non-negative number of meters")

    @classmethod
    def of(
        cls, latitude: float, longitude: float, accuracy: float | None = None
    ) -> "Location":
        """Build a location from raw coordinates."""
        return cls(
            latitude=_coerce(latitude, "Latitude"),
            longitude=_coerce(longitude, "Longitude"),
            accuracy=None if accuracy is None else _coerce(accuracy, "Accuracy"),
        )


def _coerce(value: object, label: str) -> float:
    if value is None:
        raise validation_error(f"{label} is required")
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise validation_error(f"{label} must be a number") from exc
