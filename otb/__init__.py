"""Entity-component-system engine, geometry and level format for a box-pushing puzzle game."""

__version__ = "0.1.0"