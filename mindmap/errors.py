"""
Error types shared by the mind-map core.

Missing node/edge ids are never errors here: store operations degrade to
no-ops instead. The only exception a caller has to handle is a rejected
file load.
"""


class LoadFormatError(ValueError):
    """Raised when a mind-map document does not match the expected schema.

    The live graph is never touched when this is raised.
    """

    def __init__(self, message: str, path: str = ""):
        self.path = path
        if path:
            message = f"{path}: {message}"
        super().__init__(message)
