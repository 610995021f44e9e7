"""Parsers and utilities for AC-3, AV1, H.264 and H.265 bitstreams."""

__version__ = "0.1.0"