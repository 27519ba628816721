"""HarmSyn error types."""


class HarmSynError(ValueError):
    """Invalid input: malformed parameters, files or harmonic definitions."""
