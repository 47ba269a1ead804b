"""Rendering of ServiceResult for terminals (Rich) and machines (JSON)."""
