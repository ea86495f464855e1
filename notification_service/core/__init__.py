"""Core building blocks: settings, exceptions, database base, shared schemas."""
