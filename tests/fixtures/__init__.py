"""
Test fixtures for the rpreport project.
"""
