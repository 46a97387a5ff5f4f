"""
Data access layer: MongoDB connections, database manifests and id sequences.
"""
