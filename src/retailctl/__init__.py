"""retailctl — local bootstrap CLI for the retail store sample application."""

__version__ = "0.3.0"
