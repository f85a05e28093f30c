"""AdmitFlow - student registration and admission approval service."""

__version__ = "0.1.0"


def get_version() -> str:
    """Return the installed AdmitFlow version."""
    return __version__
