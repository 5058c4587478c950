"""Core framework: base tool, configuration, events, exceptions and value objects."""
