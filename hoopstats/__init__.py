"""Basketball game and player stats tracker."""

__version__ = "1.0.0"
