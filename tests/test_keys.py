import pytest

from geocache.keys import (
    GEOCODING_CACHE,
    REVERSE_GEOCODING_CACHE,
    InvalidKeyError,
    geocoding_key,
    reverse_geocoding_key,
)


class TestCacheNames:
    def test_names(self):
        assert GEOCODING_CACHE == "geocoding"
        assert REVERSE_GEOCODING_CACHE == "reverse-geocoding"


class TestGeocodingKey:
    def test_strips_and_collapses_whitespace(self):
        assert geocoding_key("  10  Downing   St,\tLondon ") == "10 Downing St, London"

    def test_preserves_case(self):
        assert geocoding_key("Goa") == "Goa"

    @pytest.mark.parametrize("address", [None, "", "   ", "\n\t"])
    def test_blank_raises(self, address):
        with pytest.raises(InvalidKeyError, match="no address"):
            geocoding_key(address)

    def test_invalid_key_is_value_error(self):
        assert issubclass(InvalidKeyError, ValueError)


class TestReverseGeocodingKey:
    def test_basic_format(self):
        assert reverse_geocoding_key(40.7128, -74.006) == "40.7128,-74.006"

    def test_int_and_float_share_key(self):
        assert reverse_geocoding_key(40, 2) == reverse_geocoding_key(40.0, 2.0)

    def test_trailing_zeros_share_key(self):
        assert reverse_geocoding_key("40.70", "2.50") == reverse_geocoding_key(40.7, 2.5)

    def test_negative_zero_folded(self):
        assert reverse_geocoding_key(-0.0, -0.0) == "0.0,0.0"

    def test_boundaries_accepted(self):
        assert reverse_geocoding_key(-90, 180) == "-90.0,180.0"

    @pytest.mark.parametrize(
        "lat,lon",
        [(None, 1.0), (1.0, None), (91.0, 0.0), (0.0, -180.5), (float("nan"), 0.0),
         (0.0, float("inf")), ("north", 0.0)],
    )
    def test_invalid_coordinates_raise(self, lat, lon):
        with pytest.raises(InvalidKeyError):
            reverse_geocoding_key(lat, lon)
