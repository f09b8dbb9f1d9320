"""
tutorslots - weekly availability scheduling for tutors.
"""

__version__ = "0.1.0"
