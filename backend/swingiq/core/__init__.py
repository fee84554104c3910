"""
Core analysis engine: domain models and services.
"""
