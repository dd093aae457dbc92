"""HTTP gateway of a WiFi captive portal."""

__version__ = "0.1.0"
