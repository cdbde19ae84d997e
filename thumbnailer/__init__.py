"""Image and video thumbnail service backed by ffmpeg."""

__version__ = "1.0.0"
