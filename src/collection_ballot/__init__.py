"""Recurring community ballot over nominated NFT collections."""

__version__ = "0.1.0"
