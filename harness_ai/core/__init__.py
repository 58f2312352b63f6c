"""Provider-independent normalization helpers."""
