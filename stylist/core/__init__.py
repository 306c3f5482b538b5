"""Core helpers: codecs, Gemini access, prompts and response handling."""
