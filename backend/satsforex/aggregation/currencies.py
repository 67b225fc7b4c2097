from __future__ import annotations


# ISO-3 economy code -> (currency, alternate codes seen in GDP feeds)
ECONOMIES: dict[str, tuple[str, tuple[str, ...]]] = {
    "USA": ("USD", ("US",)),
    "JPN": ("JPY", ("JP",)),
    "GBR": ("GBP", ("GB",)),
    "CHN": ("CNY", ("CN",)),
    "IND": ("INR", ("IN",)),
    "CAN": ("CAD", ("CA",)),
    "AUS": ("AUD", ("AU",)),
    "BRA": ("BRL", ("BR",)),
    "RUS": ("RUB", ("RU",)),
    "KOR": ("KRW", ("KR",)),
    "SGP": ("SGD", ("SG",)),
    "CHE": ("CHF", ("CH",)),
    "HKG": ("HKD", ("HK",)),
    "SWE": ("SEK", ("SE",)),
    "MEX": ("MXN", ("MX",)),
    "ZAF": ("ZAR", ("ZA",)),
    "NOR": ("NOK", ("NO",)),
    "NZL": ("NZD", ("NZ",)),
    "THA": ("THB", ("TH",)),
    "TUR": ("TRY", ("TR",)),
    "POL": ("PLN", ("PL",)),
    "DNK": ("DKK", ("DK",)),
    "IDN": ("IDR", ("ID",)),
    "PHL": ("PHP", ("PH",)),
    "MYS": ("MYR", ("MY",)),
    "CZE": ("CZK", ("CZ",)),
    "CHL": ("CLP", ("CL",)),
    "ARG": ("ARS", ("AR",)),
    "ISR": ("ILS", ("IL",)),
    "COL": ("COP", ("CO",)),
    "SAU": ("SAR", ("SA",)),
    "ARE": ("AED", ("AE",)),
    "TWN": ("TWD", ("TW",)),
    "ROU": ("RON", ("RO",)),
    "HUN": ("HUF", ("HU",)),
    "VNM": ("VND", ("VN",)),
    "PAK": ("PKR", ("PK",)),
    "NGA": ("NGN", ("NG",)),
}

EUROZONE_COUNTRIES: tuple[str, ...] = (
    "AUT", "BEL", "CYP", "EST", "FIN", "FRA", "DEU", "GRC", "IRL", "ITA",
    "LVA", "LTU", "LUX", "MLT", "NLD", "PRT", "SVK", "SVN", "ESP", "HRV",
)

# Euro area aggregate rows; only used when no member economy is reported.
EURO_AREA_CODES: tuple[str, ...] = ("EMU", "XS", "EA")
EURO_AREA = "EURO_AREA"

CURRENCY_NAMES: dict[str, str] = {
    "BTC": "Bitcoin",
    "USD": "US Dollar",
    "EUR": "Euro",
    "JPY": "Japanese Yen",
    "GBP": "British Pound",
    "CNY": "Chinese Yuan",
    "INR": "Indian Rupee",
    "CAD": "Canadian Dollar",
    "AUD": "Australian Dollar",
    "BRL": "Brazilian Real",
    "RUB": "Russian Ruble",
    "KRW": "South Korean Won",
    "SGD": "Singapore Dollar",
    "CHF": "Swiss Franc",
    "HKD": "Hong Kong Dollar",
    "SEK": "Swedish Krona",
    "MXN": "Mexican Peso",
    "ZAR": "South African Rand",
    "NOK": "Norwegian Krone",
    "NZD": "New Zealand Dollar",
    "THB": "Thai Baht",
    "TRY": "Turkish Lira",
    "PLN": "Polish Złoty",
    "DKK": "Danish Krone",
    "IDR": "Indonesian Rupiah",
    "PHP": "Philippine Peso",
    "MYR": "Malaysian Ringgit",
    "CZK": "Czech Koruna",
    "CLP": "Chilean Peso",
    "ARS": "Argentine Peso",
    "ILS": "Israeli New Shekel",
    "COP": "Colombian Peso",
    "SAR": "Saudi Riyal",
    "AED": "UAE Dirham",
    "TWD": "New Taiwan Dollar",
    "RON": "Romanian Leu",
    "HUF": "Hungarian Forint",
    "VND": "Vietnamese Dong",
    "PKR": "Pakistani Rupee",
    "NGN": "Nigerian Naira",
    "XAU": "Gold",
    "XAG": "Silver",
}


def _build_lookup() -> tuple[dict[str, str], dict[str, str]]:
    to_currency: dict[str, str] = {}
    to_economy: dict[str, str] = {}
    for economy, (currency, alternates) in ECONOMIES.items():
        for code in (economy, *alternates):
            to_currency[code] = currency
            to_economy[code] = economy
    for member in EUROZONE_COUNTRIES:
        to_currency[member] = "EUR"
        to_economy[member] = member
    for code in EURO_AREA_CODES:
        to_currency[code] = "EUR"
        to_economy[code] = EURO_AREA
    return to_currency, to_economy


COUNTRY_TO_CURRENCY, COUNTRY_TO_ECONOMY = _build_lookup()


def currency_for_country(country_code: str) -> str | None:
    return COUNTRY_TO_CURRENCY.get(country_code.strip().upper())


def economy_for_country(country_code: str) -> str | None:
    return COUNTRY_TO_ECONOMY.get(country_code.strip().upper())


def is_eurozone_country(country_code: str) -> bool:
    return country_code.strip().upper() in EUROZONE_COUNTRIES


def is_aggregate_economy(economy: str) -> bool:
    return economy == EURO_AREA


def currency_name(code: str) -> str:
    normalized = code.strip().upper()
    return CURRENCY_NAMES.get(normalized, normalized)
