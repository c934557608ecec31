"""
Shared utilities: logging, error taxonomy and API result envelopes.
"""
