"""
Core utilities: errors, identity tokens, logging and error reporting.
"""
