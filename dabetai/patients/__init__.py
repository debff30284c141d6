"""
Patient management: CRUD over PATIENT identity records, soft delete and statistics.
"""
