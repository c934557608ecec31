"""
Satisfaction analytics over the customer set.
"""
