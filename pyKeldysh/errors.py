class ConfigurationError(ValueError):
    """
    Contradictory or missing construction parameters (inverse temperature,
    point counts, contour topology).
    """
