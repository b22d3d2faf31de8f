"""Cache key construction for the geocoding and reverse-geocoding caches."""

import math

GEOCODING_CACHE = "geocoding"
REVERSE_GEOCODING_CACHE = "reverse-geocoding"

COORDINATE_DELIMITER = ","


class InvalidKeyError(ValueError):
    """Input cannot be turned into a cache key (blank address, bad coordinates)."""


def geocoding_key(address: str | None) -> str:
    """Normalize an address into its cache key.

    Leading/trailing whitespace is stripped and internal runs of whitespace
    collapse to a single space. Case is preserved.

    Raises:
        InvalidKeyError: If *address* is None or blank.
    """
    if address is None or not address.strip():
        raise InvalidKeyError("Invalid address: no address was provided")
    return " ".join(address.split())


def _canonical(value: float | None, name: str, limit: float) -> str:
    if value is None:
        raise InvalidKeyError(f"Invalid {name}: {name} is missing")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidKeyError(f"Invalid {name}: {value!r}") from None
    if not math.isfinite(number) or not -limit <= number <= limit:
        raise InvalidKeyError(f"Invalid {name}: {value!r} is out of range")
    # -0.0 + 0.0 == 0.0, so both zeros share a key
    return repr(number + 0.0)


def reverse_geocoding_key(latitude: float | None, longitude: float | None) -> str:
    """Build the composite ``"<lat>,<lon>"`` key for a coordinate pair.

    Values are rendered with Python's shortest round-trip float repr, so
    ``40``, ``40.0`` and ``"40.00"`` all produce the same key.

    Raises:
        InvalidKeyError: If either coordinate is missing, not a number,
            or outside the valid latitude/longitude range.
    """
    lat = _canonical(latitude, "latitude", 90.0)
    lon = _canonical(longitude, "longitude", 180.0)
    return f"{lat}{COORDINATE_DELIMITER}{lon}"
