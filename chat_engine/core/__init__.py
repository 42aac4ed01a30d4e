"""
Core domain logic: hybrid search, context assembly, query intent and the
exception hierarchy.
"""
