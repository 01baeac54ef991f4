from .base import WeatherAdapter, WeatherAdapterError
from .openweathermap import OpenWeatherMapAdapter

__all__ = ["WeatherAdapter", "WeatherAdapterError", "OpenWeatherMapAdapter"]
