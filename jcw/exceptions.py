class ConfigException(Exception):
    """Configuration exception when an integration that is not available
    is called in the `Config` object, or when a setting cannot be applied.
    """
