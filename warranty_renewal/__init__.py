"""Order intake, warranty expiry notifications and renewal redemption."""

__version__ = "0.1.0"
