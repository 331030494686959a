"""Command-line interface for scalecomm."""
