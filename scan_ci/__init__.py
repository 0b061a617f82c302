"""CI helpers for differential Salesforce code scanning and scan reporting."""

__version__ = "0.1.0"
