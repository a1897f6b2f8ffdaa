"""
Service layer.

Services own transaction boundaries and report outcomes through
``ServiceResult``.
"""
