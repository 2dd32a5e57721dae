"""
Domain services: normalization, validation, duplicate detection,
sync reconciliation and live broadcast.
"""
