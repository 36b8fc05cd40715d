"""Say It Anyway — message screening and recording-time entitlements."""

__version__ = '1.0.0'
