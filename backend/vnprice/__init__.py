"""VN Price Compare backend."""
