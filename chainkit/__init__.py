"""Ethereum data types, JSON and RLP codecs, signing and log stores."""

__version__ = "0.1.0"