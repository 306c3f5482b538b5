"""Virtual stylist: dress a person photo in a garment using Gemini image models."""

__version__ = "1.0.0"
