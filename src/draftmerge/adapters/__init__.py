"""Adapters translating external payloads to and from draft values."""
