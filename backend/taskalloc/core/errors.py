class DomainError(ValueError):
    """Invalid problem input in a domain sense (bad costs, bad limits, malformed constraints)."""
