"""toolchat: tool-calling conversation loop for OpenAI chat models."""

__version__ = "0.1.0"

__all__ = ["__version__"]
