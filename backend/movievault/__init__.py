"""
MovieVault backend package.
"""
