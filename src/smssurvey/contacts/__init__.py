"""
Customer contacts: CSV import and phone number normalization.
"""
