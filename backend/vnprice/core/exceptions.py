"""Custom exception classes for the application."""


class VNPriceException(Exception):
    """Base exception for all VN Price Compare errors."""

    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(self.message)


class CrawlerNotInitializedError(VNPriceException):
    """Raised when a crawl is started before the browser session exists."""

    def __init__(self, crawler: str):
        super().__init__(f"{crawler} is not initialized. Call init() first.")


class SessionLaunchError(VNPriceException):
    """Raised when the browser engine fails to start."""

    def __init__(self, message: str):
        super().__init__(f"Browser session failed to launch: {message}")


class UnsupportedShopError(VNPriceException):
    """Raised when no crawler is registered for a shop domain."""

    def __init__(self, shop_domain: str):
        self.shop_domain = shop_domain
        super().__init__(f"Shop domain '{shop_domain}' not supported yet")
