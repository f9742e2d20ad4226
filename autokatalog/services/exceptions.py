class AutoServiceError(Exception):
    """Base class for failures reported by the read and write services."""


class AutoNotFound(AutoServiceError):
    """Raised when no Auto exists for an identifier."""

    def __init__(self, auto_id):
        self.auto_id = auto_id
        super().__init__(f"There is no Auto with the ID {auto_id}.")


class NoMatches(AutoServiceError):
    """Raised when a title search matches no Auto."""

    def __init__(self, fragment):
        self.fragment = fragment
        super().__init__(f"No Auto found for the title fragment {fragment!r}.")


class DuplicateChassisNumber(AutoServiceError):
    """Raised when a chassis number is already taken by another Auto."""

    def __init__(self, fahrgestellnummer):
        self.fahrgestellnummer = fahrgestellnummer
        super().__init__(f"The fahrgestellnummer {fahrgestellnummer} already exists.")


class VersionConflict(AutoServiceError):
    """Raised when an update carries a version that is no longer current."""

    def __init__(self, auto_id, version):
        self.auto_id = auto_id
        self.version = version
        super().__init__(f"The version {version} of Auto {auto_id} is outdated.")


class ValidationFailed(AutoServiceError):
    """Raised when an incoming payload violates field constraints."""

    def __init__(self, messages):
        self.messages = list(messages)
        super().__init__(", ".join(self.messages))
