"""
Projection configuration: built-in defaults and the YAML loader.
"""
