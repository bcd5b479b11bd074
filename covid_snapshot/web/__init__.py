"""
Static file serving over plain HTTP.
"""
