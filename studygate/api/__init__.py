"""HTTP API for StudyGate."""
