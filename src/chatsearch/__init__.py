"""Local search over a messaging app's contacts, conversations and messages."""

__version__ = "0.1.0"
