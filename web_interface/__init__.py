"""
JSON API over the vault state machine and queries
"""
