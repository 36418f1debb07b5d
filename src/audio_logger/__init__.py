"""Audio Logger - codec, bit rate and sample rate of every file in a music folder."""

__version__ = "0.1.0"
