"""Currency converter service: cache-aside exchange rates over Redis and ExchangeRate-API."""

__version__ = "2.0.0"
