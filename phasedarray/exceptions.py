from __future__ import annotations


class ConfigurationError(ValueError):
    """Invalid array, element or weight configuration.

    Raised eagerly where the configuration is built or consumed; never
    coerced into a default.
    """
