"""Common type definitions for StudyGate.

This module provides type aliases for commonly used types across the application,
improving type safety and reducing repetition.
"""

from typing import Any, TypeAlias

# DICOM JSON object as returned by QIDO-RS
DicomJSON: TypeAlias = dict[str, Any]

# Query parameters sent to a backend
QueryParams: TypeAlias = dict[str, Any]
