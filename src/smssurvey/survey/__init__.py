"""
Per-customer survey conversations: reply interpretation, the conversation
engine and the in-memory customer and schedule stores.
"""
