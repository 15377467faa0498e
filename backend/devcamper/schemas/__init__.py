"""Request and response models (pydantic v2, camelCase on the wire)."""
