from .base import HttpProvider, ProviderError, RequestConfig
from .ipgeo import IpGeolocationProvider
from .sunrise_sunset import SunriseSunsetClient

__all__ = [
    "HttpProvider",
    "IpGeolocationProvider",
    "ProviderError",
    "RequestConfig",
    "SunriseSunsetClient",
]
