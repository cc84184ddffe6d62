"""Find the most culturally significant movie released in a birth month."""

__version__ = "0.1.0"
