"""
trinarrator: burn three narrators' commentary into a video.

Each narrator's lines become their own styled subtitle layer; ffmpeg
encodes the result, and the outcome is recorded in three stores.
"""

__version__ = "1.0.0"
