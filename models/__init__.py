"""
models/ - Domain Types
======================
Filters, pagination envelopes, the caller identity and settings defaults.
No database access lives here.
"""
