"""
Motion Comfort

A Python library that turns an observer's per-frame pose into motion
sickness countermeasures: a narrowed camera field of view and a
vignette mask for the compositor.
"""

__version__ = "0.1.0"
__author__ = "Motion Comfort Team"

# Global debug flag - set to True for verbose per-frame output
DEBUG = False
