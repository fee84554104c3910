"""
SwingIQ

Golf swing analysis engine: phase classification, swing metrics and
biomechanics from pose landmarks.
"""

__version__ = "1.0.0"
