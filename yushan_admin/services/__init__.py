"""
Service layer: preference persistence and the demo user data source.
"""
