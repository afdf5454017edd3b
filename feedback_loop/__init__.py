"""
Report feedback loop: user ratings → fine-tune dataset → provider job →
published model id.
"""

__version__ = "0.1.0"
