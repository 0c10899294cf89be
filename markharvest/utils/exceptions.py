"""Custom exceptions for markharvest."""


class HarvestError(Exception):
    """Base exception for all markharvest errors."""

    pass


class FetchError(HarvestError):
    """Exception raised when a single URL cannot be retrieved."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class SegmentationError(HarvestError):
    """Exception raised when segmentation parameters are invalid."""

    pass
