import datetime

from satsforex.config.settings import FeedSettings
from satsforex.providers import coingecko, imf


def test_coingecko_url_lists_every_quote_currency() -> None:
    feed_settings = FeedSettings(coingecko_api_key=None)
    url = coingecko.build_url(feed_settings)

    assert url.startswith("https://api.coingecko.com/api/v3/simple/price?")
    assert "ids=bitcoin" in url
    assert "vs_currencies=usd,eur,jpy" in url
    assert url.endswith(",xau,xag")


def test_coingecko_pro_key_switches_host_and_header() -> None:
    feed_settings = FeedSettings(coingecko_api_key="secret")

    url = coingecko.build_url(feed_settings)
    headers = coingecko.build_headers(feed_settings)

    assert url.startswith("https://pro-api.coingecko.com/api/v3/simple/price?")
    assert headers["x-cg-pro-api-key"] == "secret"
    assert "User-Agent" in headers


def test_imf_url_defaults_to_previous_year() -> None:
    feed_settings = FeedSettings()
    expected_year = str(datetime.date.today().year - 1)

    url = imf.build_url(feed_settings)

    assert url == f"https://www.imf.org/external/datamapper/api/v1/NGDPD?periods={expected_year}"


def test_imf_url_honours_explicit_period() -> None:
    url = imf.build_url(FeedSettings(), {"periods": "2022"})
    assert url.endswith("/NGDPD?periods=2022")
    assert imf.build_countries_url(FeedSettings()).endswith("/api/v1/countries")


def test_default_year_is_previous_calendar_year() -> None:
    assert imf.default_year(datetime.date(2025, 1, 1)) == "2024"


def test_history_url_and_supported_currencies() -> None:
    feed_settings = FeedSettings(coingecko_api_key=None)

    url = coingecko.build_history_url(feed_settings, "EUR")

    assert url == (
        "https://api.coingecko.com/api/v3/coins/bitcoin/market_chart"
        "?vs_currency=eur&days=365&precision=full"
    )
    assert coingecko.build_history_url(feed_settings, "usd", 7).endswith("vs_currency=usd&days=7&precision=full")
    assert coingecko.is_supported_currency(feed_settings, " XAU ") is True
    assert coingecko.is_supported_currency(feed_settings, "doge") is False
