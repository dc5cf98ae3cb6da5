"""Turn a project directory into a single context file for LLMs."""

__version__ = "0.1.0"
