"""
babysort - organise baby photos into age brackets and events.
"""

__version__ = "1.0.0"
