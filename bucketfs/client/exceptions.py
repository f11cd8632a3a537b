class StorageError(Exception):
    """Base exception for object store errors."""
    def __init__(self, message: str, code: str = "ERR_UNKNOWN"):
        self.code = code
        self.message = message
        super().__init__(f"{code}: {message}")

class ObjectNotFoundError(StorageError):
    """The named object does not exist."""
    def __init__(self, message: str, key: str = None):
        self.key = key
        super().__init__(message, code="ERR_OBJECT_NOT_FOUND")

class StoragePermissionError(StorageError):
    """Access to the bucket or object was denied."""
    def __init__(self, message: str, key: str = None):
        self.key = key
        super().__init__(message, code="ERR_PERMISSION")

class StorageConnectionError(StorageError):
    """The store could not be reached."""
    def __init__(self, message: str):
        super().__init__(message, code="ERR_CONNECTION")

class UnsupportedOperationError(StorageError):
    """The store has no primitive to model this operation on."""
    def __init__(self, message: str, operation: str = None):
        code = "ERR_UNSUPPORTED"
        if operation:
            code = f"ERR_UNSUPPORTED_{operation.upper()}"
        super().__init__(message, code=code)
