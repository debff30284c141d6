"""
Doctor management: CRUD over DOCTOR identity records, specialty search and patient assignment.
"""
