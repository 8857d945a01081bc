class PersistenceError(Exception):
    """Raised when a store (processing log, profiles, endorsements) cannot be read or written."""
