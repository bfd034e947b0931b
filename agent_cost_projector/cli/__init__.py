"""
Command-line presentation of projection results.
"""
