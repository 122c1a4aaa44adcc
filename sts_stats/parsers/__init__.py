"""
Run file parsing and card classification.
"""
