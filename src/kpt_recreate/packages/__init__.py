"""Kptfile packages: manifest reading and discovery."""
from kpt_recreate.packages.discovery import KptfileLocation, iter_kptfiles
from kpt_recreate.packages.kptfile import (
    KPTFILE_NAME,
    Kptfile,
    UpstreamReference,
    load_kptfile,
    read_kptfile,
)
from kpt_recreate.core.errors import ManifestParseError, MissingFieldError

__all__ = [
    "KPTFILE_NAME",
    "Kptfile",
    "KptfileLocation",
    "ManifestParseError",
    "MissingFieldError",
    "UpstreamReference",
    "iter_kptfiles",
    "load_kptfile",
    "read_kptfile",
]
