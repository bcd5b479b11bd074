"""
CSV parsing, row extraction and time-series helpers.

The extractor is the pure core of the project: raw CSV bytes in, a short
summary string out. Series helpers build pandas objects for analysis/export.
"""
