"""Failure taxonomy for the scrape -> EV -> trends pipeline."""


class ScratcherError(Exception):
    """Base class for all pipeline errors"""


class FetchFailure(ScratcherError):
    """Network or HTTP level failure for a single page"""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch {url}: {reason}")


class ExtractionFailure(ScratcherError):
    """A game page produced no valid prize tiers"""

    def __init__(self, url: str, reason: str = "no prize tiers found"):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to extract {url}: {reason}")


class EmptyBatchFailure(ScratcherError):
    """
    A whole batch produced zero usable games.

    Usually means the source site changed its markup, so this one is raised
    to the caller instead of being absorbed.
    """
