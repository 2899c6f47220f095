"""learntrack: progress tracking backend for the IFRS 17 e-learning course."""

__version__ = "1.0.0"
