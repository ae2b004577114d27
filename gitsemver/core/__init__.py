"""Core layer: version model, git access, configuration, logging and errors."""
