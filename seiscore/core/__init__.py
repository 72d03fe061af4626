"""
Core utilities shared by the data fetchers, scoring engine and API server.
"""
