"""Authentication: token codec, claims assembly, login."""
