"""
Configuration loading and validation.

Provides strongly typed settings objects for the GitHub data source, the
tracked datasets and the static file server, loaded from environment
variables with upfront validation.
"""
