"""Model-calling operations and the session controller."""
