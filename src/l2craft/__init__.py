"""l2craft - IOS-XR L2 config analysis and change generation."""

__version__ = "0.1.0"
