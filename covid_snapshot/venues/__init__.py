"""
Data sources for the raw CSV datasets.

Defines the DatasetSource protocol and the GitHub contents API client that
implements it.
"""
