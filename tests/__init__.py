"""StudyGate test suite."""
