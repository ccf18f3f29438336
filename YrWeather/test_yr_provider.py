"""Tests for the yr.no weather fetcher."""
from datetime import timezone
from unittest.mock import Mock, patch

import pytest
import requests
from condition_catalog import INVALID_CONDITION
from weather_data import Coordinate, WeatherReading
from weather_provider import TransportError
from yr_provider import YrWeatherFetcher, parse_feed_time


RAINY_FEED = b"""<?xml version="1.0" encoding="UTF-8"?>
<weatherdata xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance" created="2024-05-01T09:00:00Z">
  <meta><model name="met_public_forecast" termin="2024-05-01T06:00:00Z"/></meta>
  <product class="pointData">
    <time datatype="forecast" from="2024-05-01T10:00:00Z" to="2024-05-01T10:00:00Z">
      <location altitude="10" latitude="59.9127" longitude="10.7461">
        <temperature id="TTT" unit="celsius" value="13.5"/>
        <windSpeed id="ff" mps="3.2" beaufort="2" name="Svak vind"/>
      </location>
    </time>
    <time datatype="forecast" from="2024-05-01T10:00:00Z" to="2024-05-01T11:00:00Z">
      <location altitude="10" latitude="59.9127" longitude="10.7461">
        <precipitation unit="mm" value="0.0"/>
        <symbol id="Sun" number="1"/>
      </location>
    </time>
    <time datatype="forecast" from="2024-05-01T12:00:00Z" to="2024-05-01T12:00:00Z">
      <location altitude="10" latitude="59.9127" longitude="10.7461">
        <temperature id="TTT" unit="celsius" value="15.1"/>
      </location>
    </time>
    <time datatype="forecast" from="2024-05-01T12:00:00Z" to="2024-05-01T13:00:00Z">
      <location altitude="10" latitude="59.9127" longitude="10.7461">
        <precipitation unit="mm" value="0.0"/>
        <symbol id="PartlyCloud" number="3"/>
      </location>
    </time>
    <time datatype="forecast" from="2024-05-01T15:00:00Z" to="2024-05-01T16:00:00Z">
      <location altitude="10" latitude="59.9127" longitude="10.7461">
        <precipitation unit="mm" value="2.4"/>
        <symbol id="Rain" number="10"/>
      </location>
    </time>
    <time datatype="forecast" from="2024-05-01T20:00:00Z" to="2024-05-01T21:00:00Z">
      <location altitude="10" latitude="59.9127" longitude="10.7461">
        <symbol id="LightCloud" number="2"/>
      </location>
    </time>
  </product>
</weatherdata>
"""

DRY_FEED = b"""<?xml version="1.0" encoding="UTF-8"?>
<weatherdata>
  <product class="pointData">
    <time datatype="forecast" from="2024-05-01T10:00:00Z" to="2024-05-01T10:00:00Z">
      <location><temperature id="TTT" unit="celsius" value="21.0"/></location>
    </time>
    <time datatype="forecast" from="2024-05-01T10:00:00Z" to="2024-05-01T11:00:00Z">
      <location><symbol id="Sun" number="1"/></location>
    </time>
    <time datatype="forecast" from="2024-05-01T14:00:00Z" to="2024-05-01T15:00:00Z">
      <location><symbol id="PartlyCloud" number="3"/></location>
    </time>
    <time datatype="forecast" from="2024-05-01T22:00:00Z" to="2024-05-01T23:00:00Z">
      <location><symbol id="LightCloud" number="2"/></location>
    </time>
    <time datatype="forecast" from="2024-05-02T06:00:00Z" to="2024-05-02T07:00:00Z">
      <location><symbol id="Rain" number="10"/></location>
    </time>
  </product>
</weatherdata>
"""


def make_response(body, status_code=200, chunk_size=None):
    """Build a mock streamed response."""
    response = Mock()
    response.ok = 200 <= status_code < 400
    response.status_code = status_code
    if chunk_size:
        chunks = [body[i:i + chunk_size] for i in range(0, len(body), chunk_size)]
    else:
        chunks = [body]
    response.iter_content.return_value = chunks
    return response


@pytest.fixture
def fetcher():
    """Create fetcher that treats UTC dates as "today"."""
    return YrWeatherFetcher(user_agent="test-agent/1.0", timeout=5, tz=timezone.utc)


@pytest.fixture
def oslo():
    return Coordinate(59.91273, 10.74609)


def test_fetch_rain_later_today(fetcher, oslo):
    """Test current values and the rainy later slot are extracted."""
    with patch('yr_provider.requests.get') as mock_get:
        mock_get.return_value = make_response(RAINY_FEED)

        reading = fetcher.fetch(oslo)

        assert isinstance(reading, WeatherReading)
        assert reading.temperature == "13.5"
        assert reading.condition_code == 1
        assert reading.later_condition_code == 10
        assert reading.forecast_text == "Rain"
        assert reading.place_label is None


def test_fetch_dry_day_uses_last_slot_of_today(fetcher, oslo):
    """Test that rain tomorrow is ignored and the last slot today is used."""
    with patch('yr_provider.requests.get') as mock_get:
        mock_get.return_value = make_response(DRY_FEED)

        reading = fetcher.fetch(oslo)

        assert reading.temperature == "21.0"
        assert reading.condition_code == 1
        assert reading.later_condition_code == 2
        assert reading.forecast_text == "LightCloud"


def test_fetch_request_parameters(fetcher, oslo):
    """Test the request is keyed by rounded lat/lon and streamed."""
    with patch('yr_provider.requests.get') as mock_get:
        mock_get.return_value = make_response(DRY_FEED)

        fetcher.fetch(oslo)

        args, kwargs = mock_get.call_args
        assert args[0] == YrWeatherFetcher.BASE_URL
        assert kwargs["params"] == {"lat": 59.9127, "lon": 10.7461}
        assert kwargs["headers"] == {"User-Agent": "test-agent/1.0"}
        assert kwargs["timeout"] == 5
        assert kwargs["stream"] is True


def test_fetch_closes_response(fetcher, oslo):
    """Test that the streamed response is always closed."""
    with patch('yr_provider.requests.get') as mock_get:
        response = make_response(RAINY_FEED)
        mock_get.return_value = response

        fetcher.fetch(oslo)

        response.close.assert_called_once()


def test_fetch_stops_reading_once_rain_found(fetcher, oslo):
    """Test that parsing ends early and the rest of the feed isn't read."""
    split = RAINY_FEED.index(b'<time datatype="forecast" from="2024-05-01T20:00:00Z"')
    read = []

    def chunks(chunk_size=None):
        for chunk in (RAINY_FEED[:split], RAINY_FEED[split:]):
            read.append(chunk)
            yield chunk

    with patch('yr_provider.requests.get') as mock_get:
        response = make_response(b"")
        response.iter_content.side_effect = chunks
        mock_get.return_value = response

        reading = fetcher.fetch(oslo)

        assert reading.later_condition_code == 10
        assert len(read) == 1


def test_fetch_small_chunks(fetcher, oslo):
    """Test parsing when the feed arrives in tiny pieces."""
    with patch('yr_provider.requests.get') as mock_get:
        mock_get.return_value = make_response(RAINY_FEED, chunk_size=16)

        reading = fetcher.fetch(oslo)

        assert reading.temperature == "13.5"
        assert reading.later_condition_code == 10


def test_fetch_missing_fields_gives_sentinels(fetcher, oslo):
    """Test a well-formed feed without data yields sentinels, not an error."""
    with patch('yr_provider.requests.get') as mock_get:
        mock_get.return_value = make_response(b"<weatherdata><product/></weatherdata>")

        reading = fetcher.fetch(oslo)

        assert reading.temperature is None
        assert reading.has_valid_temperature is False
        assert reading.condition_code == INVALID_CONDITION
        assert reading.later_condition_code == INVALID_CONDITION
        assert reading.forecast_text is None


def test_fetch_skips_unusable_symbol_number(fetcher, oslo):
    """Test that a symbol without a numeric number is skipped."""
    feed = b"""<weatherdata><product>
      <time from="2024-05-01T10:00:00Z" to="2024-05-01T11:00:00Z">
        <location><temperature value="NaN"/><symbol id="Odd" number="x"/><symbol id="Cloud" number="4"/></location>
      </time>
    </product></weatherdata>"""
    with patch('yr_provider.requests.get') as mock_get:
        mock_get.return_value = make_response(feed)

        reading = fetcher.fetch(oslo)

        assert reading.condition_code == 4
        assert reading.temperature == "NaN"
        assert reading.has_valid_temperature is False


def test_fetch_forecast_text_falls_back_to_catalog(fetcher, oslo):
    """Test forecast text when the later symbol has no id attribute."""
    feed = b"""<weatherdata><product>
      <time from="2024-05-01T10:00:00Z" to="2024-05-01T11:00:00Z">
        <location><temperature value="3"/><symbol number="4"/></location>
      </time>
      <time from="2024-05-01T16:00:00Z" to="2024-05-01T17:00:00Z">
        <location><symbol number="22"/></location>
      </time>
    </product></weatherdata>"""
    with patch('yr_provider.requests.get') as mock_get:
        mock_get.return_value = make_response(feed)

        reading = fetcher.fetch(oslo)

        assert reading.later_condition_code == 22
        assert reading.forecast_text == "Light Rain and Thunder"


def test_fetch_http_error(fetcher, oslo):
    """Test handling of HTTP errors."""
    with patch('yr_provider.requests.get') as mock_get:
        response = make_response(b"Forbidden", status_code=403)
        mock_get.return_value = response

        with pytest.raises(TransportError) as exc_info:
            fetcher.fetch(oslo)

        assert "403" in str(exc_info.value)
        response.close.assert_called_once()


def test_fetch_network_error(fetcher, oslo):
    """Test handling of network errors."""
    with patch('yr_provider.requests.get') as mock_get:
        mock_get.side_effect = requests.exceptions.ConnectionError("Connection refused")

        with pytest.raises(TransportError) as exc_info:
            fetcher.fetch(oslo)

        assert "Network error" in str(exc_info.value)


def test_fetch_timeout(fetcher, oslo):
    """Test that a timeout is a transport failure."""
    with patch('yr_provider.requests.get') as mock_get:
        mock_get.side_effect = requests.exceptions.Timeout("timed out")

        with pytest.raises(TransportError):
            fetcher.fetch(oslo)


def test_fetch_error_while_streaming(fetcher, oslo):
    """Test that a broken stream mid-read is a transport failure."""
    with patch('yr_provider.requests.get') as mock_get:
        response = make_response(b"")
        response.iter_content.side_effect = requests.exceptions.ChunkedEncodingError("broken")
        mock_get.return_value = response

        with pytest.raises(TransportError):
            fetcher.fetch(oslo)


def test_fetch_malformed_xml(fetcher, oslo):
    """Test that a truncated document is a transport failure."""
    with patch('yr_provider.requests.get') as mock_get:
        mock_get.return_value = make_response(b"<weatherdata><product><time from=")

        with pytest.raises(TransportError) as exc_info:
            fetcher.fetch(oslo)

        assert "XML" in str(exc_info.value)


def test_parse_feed_time():
    """Test feed timestamp parsing."""
    parsed = parse_feed_time("2024-05-01T10:00:00Z", timezone.utc)

    assert parsed.year == 2024
    assert parsed.hour == 10
    assert parsed.tzinfo is not None
    assert parse_feed_time(None) is None
    assert parse_feed_time("yesterday") is None
