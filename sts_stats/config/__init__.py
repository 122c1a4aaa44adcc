"""
Configuration and runs directory resolution.
"""
