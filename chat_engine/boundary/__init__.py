"""
Boundary layer: persistence (db) and corpus retrieval (vdb) adapters.
"""
