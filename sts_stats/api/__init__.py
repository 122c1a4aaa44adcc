"""
Local HTTP API for run statistics.
"""
