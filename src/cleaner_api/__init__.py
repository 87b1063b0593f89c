"""PC Cleaner entitlement and redeem-code API."""

__version__ = "1.0.0"
