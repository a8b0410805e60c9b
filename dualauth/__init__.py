"""DualAuth - session and JWT authentication service."""

__version__ = "0.1.0"
