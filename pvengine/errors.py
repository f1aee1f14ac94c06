"""Exception hierarchy for malformed collaborator input.

Expected infeasibility (equipment that cannot be wired together, panels
left unassigned) is reported as data by the electrical verifier and never
raised.  These exceptions cover inputs that cannot be interpreted at all.
"""

from __future__ import annotations


class PVSizerError(Exception):
    """Base class for engine errors."""


class ClimateParseError(PVSizerError, ValueError):
    """A weather file could not be turned into an 8760-hour climate record."""


class LoadProfileError(PVSizerError, ValueError):
    """A load profile could not be resolved into an 8760-hour curve."""


class CatalogError(PVSizerError, LookupError):
    """An equipment id is not present in the catalog."""
