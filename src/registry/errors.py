class RegistryError(Exception):
    pass


class InvalidArgument(RegistryError, ValueError):
    """Malformed request input. Raised before any table is touched."""


class AddressResolutionFailure(RegistryError, RuntimeError):
    """The caller's network address could not be determined."""
