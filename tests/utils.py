def log_values(span):
    """The key/values of every log entry of ``span``, oldest first."""
    return [log.key_values for log in span.logs]
