"""Custom exceptions for the MedSafe engine."""


class MedSafeError(Exception):
    """Base exception for all MedSafe errors."""
    pass


class DrugDataError(MedSafeError, ValueError):
    """A drug document failed validation at the loading boundary."""
    pass


class CatalogLoadError(MedSafeError):
    """A catalog source could not be read or reached."""
    pass


class DoseRefusedError(MedSafeError):
    """A dose cannot be logged: the strip is expired or out of stock."""
    pass
