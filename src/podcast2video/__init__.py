"""podcast2video - Podcast episode to video publisher.

Turns a single podcast episode from an RSS feed into a still-image video
and publishes it with metadata derived from the feed.
"""

__version__ = "0.1.0"
