"""
Inbound SMS webhook.
"""
