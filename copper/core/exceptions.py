"""
Centralized exception hierarchy for copper.

Every error raised by the store, the runtime providers, the acquisition
pipeline and the self-updater derives from CopperError. The CLI maps the
top-level categories to exit codes.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class CopperError(Exception):
    """Base exception for all copper errors."""

    pass


# ============================================================================
# Configuration Exceptions
# ============================================================================


class ConfigurationError(CopperError):
    """Invalid user input or configuration. Raised before any side effect."""

    pass


class UnknownRuntimeError(ConfigurationError):
    """Raised when a runtime name has no registered provider."""

    def __init__(self, runtime: str, available=()):
        self.runtime = runtime
        self.available = list(available)
        msg = f"Unknown runtime: {runtime}"
        if self.available:
            msg += f" (available: {', '.join(self.available)})"
        super().__init__(msg)


class InvalidVersionError(ConfigurationError):
    """Invalid version format."""

    pass


class InvalidMajorError(InvalidVersionError):
    """Major component of a loose version is not a non-negative integer."""

    pass


class InvalidMinorError(InvalidVersionError):
    """Minor component of a loose version is not a non-negative integer."""

    pass


class InvalidPatchError(InvalidVersionError):
    """Patch component of a loose version is not a non-negative integer."""

    pass


class SettingsError(ConfigurationError):
    """Configuration file could not be read or has invalid values."""

    pass


# ============================================================================
# Catalog Exceptions
# ============================================================================


class CatalogError(CopperError):
    """Base exception for remote catalog errors."""

    pass


class CatalogFetchError(CatalogError):
    """Every mirror failed to return a catalog document."""

    pass


class CatalogParseError(CatalogError):
    """Catalog document was fetched but is not valid JSON."""

    pass


class DownloadTargetConversionError(CatalogError):
    """A catalog entry could not be converted to a download target."""

    pass


class NoMatchingTargetError(CatalogError):
    """No catalog entry satisfies the requested version range."""

    def __init__(self, runtime: str, version_spec: str):
        self.runtime = runtime
        self.version_spec = version_spec
        super().__init__(f"No {runtime} version matching {version_spec} available")


# ============================================================================
# Download and Integrity Exceptions
# ============================================================================


class DownloadError(CopperError):
    """Exception raised when a download fails."""

    pass


class ShasumError(CopperError):
    """Base exception for checksum errors."""

    pass


class ShasumFetchError(ShasumError):
    """The checksum manifest could not be fetched."""

    pass


class InvalidShasumFileError(ShasumError):
    """The checksum manifest has a malformed line."""

    pass


class ShasumNotFoundError(ShasumError):
    """The checksum manifest has no line for the archive."""

    pass


class IncorrectShasumError(ShasumError):
    """Downloaded archive does not match its expected checksum."""

    def __init__(self, filename: str, expected: str, actual: str):
        self.filename = filename
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Checksum mismatch for {filename}: expected {expected}, got {actual}"
        )


# ============================================================================
# Decompression Exceptions
# ============================================================================


class DecompressError(CopperError):
    """Base exception for archive decompression errors."""

    pass


class DecompressorCreationError(DecompressError):
    """The archive compression is unknown or unsupported by the runtime."""

    pass


class UnzipError(DecompressError):
    """Extraction failed or produced no top-level directory."""

    pass


class DirNotExistsError(DecompressError):
    """The scratch directory to extract into does not exist."""

    pass


# ============================================================================
# Store Exceptions
# ============================================================================


class StoreError(CopperError):
    """Base exception for store errors."""

    pass


class UnableToOpenDirError(StoreError):
    """A store or cache directory exists but cannot be opened."""

    pass


class UnableToCreateDirError(StoreError):
    """A store or cache directory cannot be created."""

    pass


class StateError(StoreError):
    """
    The store is not in the state a command needs.

    These are informational failures: nothing was changed.
    """

    pass


class NoConfDirError(StateError):
    """No version of the runtime has ever been installed."""

    def __init__(self, runtime: str):
        self.runtime = runtime
        super().__init__(f"No {runtime} versions installed")


class NoVersionDirError(StateError):
    """The requested version is not installed."""

    def __init__(self, runtime: str, version: str):
        self.runtime = runtime
        self.version = version
        super().__init__(f"{runtime} - {version} not installed")


class NoMatchingVersionError(StateError):
    """No installed version satisfies the requested range."""

    def __init__(self, runtime: str, version_spec: str):
        self.runtime = runtime
        self.version_spec = version_spec
        super().__init__(
            f"No installed version matching {version_spec} for {runtime} was found"
        )


# ============================================================================
# Self-Update Exceptions
# ============================================================================


class UpdateError(CopperError):
    """Base exception for self-update errors."""

    pass


class ReleaseFetchError(UpdateError):
    """The release feed could not be fetched."""

    pass


class InvalidReleaseError(UpdateError):
    """The release feed document is malformed."""

    pass


class UnsupportedTargetError(UpdateError):
    """No release asset exists for this OS/architecture."""

    pass


class SelfUpdateUnsupportedError(UpdateError):
    """The running copy is not a standalone executable that can be replaced."""

    pass
