from .weather import LocationUnavailable, WeatherResolutionService, fahrenheit_to_celsius

__all__ = ["LocationUnavailable", "WeatherResolutionService", "fahrenheit_to_celsius"]
