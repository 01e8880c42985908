"""Keep-alive pinger: scheduled HTTP pings with a live dashboard."""
__version__ = "1.0.0"
