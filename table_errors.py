class TableError(Exception):
    """Base class for every recoverable editor error."""


class OutOfRange(TableError):
    def __init__(self, kind: str, index: int, size: int):
        self.kind = kind
        self.index = index
        self.size = size
        super().__init__(f"{kind} index {index} out of range (size {size})")


class NoHistory(TableError):
    def __init__(self, direction: str):
        self.direction = direction
        super().__init__(f"Nothing to {direction}")


class NoTableLoaded(TableError):
    def __init__(self):
        super().__init__("No table loaded")


class EmptyPayload(TableError):
    def __init__(self):
        super().__init__("Replacement table has no header row")


class InvalidAnalysisResponse(TableError):
    pass


class TransportFailure(TableError):
    pass


class AnalysisInProgress(TableError):
    def __init__(self):
        super().__init__("Analysis already running")


class EmptyInstruction(TableError):
    def __init__(self):
        super().__init__("Instruction required")


class UploadError(TableError):
    pass
