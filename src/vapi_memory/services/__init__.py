"""Service layer for vapi-memory."""
