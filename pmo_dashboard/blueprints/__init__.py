"""
PMO Dashboard
Blueprint registry.
"""
