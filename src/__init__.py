"""
pyrebarlayout: bar arrangement synthesis and selection for continuous RC beams.
"""

__version__ = "0.1.0"
