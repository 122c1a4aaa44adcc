"""
Run loading, aggregation and query services.
"""
