"""
SMS customer-satisfaction survey service.
"""

__version__ = "0.1.0"
