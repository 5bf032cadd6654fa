"""
repositories/ - Data Access Layer
==================================
Each repository encapsulates all SQL queries for one storefront entity.
Repositories build parameterized statements, run them through db.executor
and return plain dicts with normalized ids.
"""
