"""
Core calculation engine for the Agent Cost Projector.

This package contains the pure projection functions: adoption and cost
projection, scenario matrices, staged rollout and the licensing
breakpoint search.
"""
