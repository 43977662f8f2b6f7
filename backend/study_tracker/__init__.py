"""Study Tracker: spaced repetition scheduling for study topics."""

__version__ = "0.1.0"
