"""
Language-specific generators.
"""
