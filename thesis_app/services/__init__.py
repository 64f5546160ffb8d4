"""
Services module for the Thesis Defense Platform.
"""
