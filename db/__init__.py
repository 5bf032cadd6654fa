"""
db/ - Database Layer
====================
PostgreSQL connection pool, the single SQL execution entry point,
schema creation and sample data.
This layer is the lowest in the architecture and has no dependencies on other layers.
"""
