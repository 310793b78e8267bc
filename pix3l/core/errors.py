import os


class ImageIOError(Exception):
    """
    A load or save failure, carrying the operation name and a readable reason.
    """

    def __init__(self, operation: str, path: str, reason: str):
        self.operation = operation
        self.path = path
        self.reason = reason
        file_name = os.path.normpath(path) if path else "(unknown)"
        super().__init__(f"Cannot {operation} {file_name}: {reason}")


class ImageLoadError(ImageIOError):
    def __init__(self, path: str, reason: str):
        super().__init__("load", path, reason)


class ImageSaveError(ImageIOError):
    def __init__(self, path: str, reason: str):
        super().__init__("save", path, reason)
