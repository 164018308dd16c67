"""
Core Package

Data models and schema validation used across stamp_toolkit.
"""
