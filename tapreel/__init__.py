"""Tap an RFID tag, play the mapped video."""

__version__ = "0.1.0"
