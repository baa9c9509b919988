"""daily-board: a personal task board with daily rollover and streak tracking."""

__version__ = "0.1.0"
