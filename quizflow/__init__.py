"""
QuizFlow - compiles quiz scene graphs into interactive players
"""

__version__ = "0.1.0"
