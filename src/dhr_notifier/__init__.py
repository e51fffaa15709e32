"""dhr-notifier: relays DHR payment events to webhook subscribers."""

__version__ = "0.1.0"
