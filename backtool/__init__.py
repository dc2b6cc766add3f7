"""backtool -- scaffold an Express + JWT backend from the command line."""

__version__ = "1.0.3"
