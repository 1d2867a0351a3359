"""
Error taxonomy for CrowdMap commands.

None of these are fatal to the process. Each carries a stable ``code``
so the HTTP layer can report it without string matching.
"""


class CrowdMapError(Exception):
    """Base class for errors reported back to a caller."""
    code = 'CrowdMapError'

    def to_dict(self) -> dict:
        return {'error': str(self), 'code': self.code}


class UnknownLocation(CrowdMapError):
    """A command or query targets a key absent from the registry."""
    code = 'UnknownLocation'

    def __init__(self, key):
        super().__init__(f'Unknown location: {key}')
        self.key = key


class MissingFields(CrowdMapError):
    """A command is missing one or more required fields."""
    code = 'MissingFields'

    def __init__(self, *fields: str):
        super().__init__(f'Missing fields: {", ".join(fields)}')
        self.fields = fields


class InvalidValue(CrowdMapError):
    """A field is present but malformed or out of range."""
    code = 'InvalidValue'
