"""
security/ - Access Control
==========================
Admin checks applied to service operations.
"""
