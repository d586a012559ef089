# Filename: ninja_errors.py


class DebugNinjaError(Exception):
    """Fatal error: the run stops and the process exits with status 1."""


class UsageError(DebugNinjaError):
    pass


class OutputCollisionError(DebugNinjaError):
    pass


class StagingCollisionError(DebugNinjaError):
    pass


class StagingError(DebugNinjaError):
    pass


class ArchiveError(DebugNinjaError):
    pass
