"""
Command line interface for babysort.
"""
