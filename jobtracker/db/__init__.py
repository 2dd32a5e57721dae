"""
MongoDB access.
"""
