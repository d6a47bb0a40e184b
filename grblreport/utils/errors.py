"""
Custom exception types for the grblreport reporting pipeline.
Keep this focused and non-redundant; prefer built-ins where appropriate.
"""


class SettingReadError(RuntimeError):
    """Persisted coordinate data could not be read from the settings store."""

    def __init__(self, index: int, message: str = "read failed"):
        self.index = index
        self.original_message = message
        super().__init__(f"Setting Read Error [{index}]: {message}")

    def __str__(self):
        return f"Setting Read Error [{self.index}]: {self.original_message}"


class TransportError(RuntimeError):
    """Output transport could not be opened or configured."""

    def __init__(self, message: str):
        self.original_message = message
        super().__init__(f"Transport Error: {message}")

    def __str__(self):
        return f"Transport Error: {self.original_message}"
