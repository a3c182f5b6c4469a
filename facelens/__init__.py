"""Face attribute analysis service and attendance kiosk."""

__version__ = "0.1.0"
