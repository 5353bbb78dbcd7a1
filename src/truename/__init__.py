"""TrueName - context-aware name disclosure with a compliance audit trail."""

__version__ = "0.1.0"
