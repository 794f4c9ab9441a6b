class CrawlError(Exception):
    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class InvalidURLError(CrawlError):
    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class TargetNotFoundError(CrawlError):
    def __init__(self, message: str = "Website not found"):
        super().__init__(message, status_code=404)


class TargetTimeoutError(CrawlError):
    def __init__(
        self, message: str = "Request timeout - website took too long to respond"
    ):
        super().__init__(message, status_code=408)


class StoreError(Exception):
    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class InvalidInputError(StoreError):
    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class DuplicateRecordError(StoreError):
    def __init__(self, message: str):
        super().__init__(message, status_code=409)


class CustomerNotFoundError(StoreError):
    def __init__(self, message: str = "Customer not found"):
        super().__init__(message, status_code=404)
