"""ContentMagic: AI-assisted social-media content generation backend."""

__version__ = "0.1.0"
