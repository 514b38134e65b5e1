"""Flight itinerary extraction for fare-drop tracking."""

__version__ = "0.3.0"
