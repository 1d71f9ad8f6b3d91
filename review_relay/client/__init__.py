"""Guest-side client for the review relay API."""

from review_relay.client.session import ReviewSession, SubmissionState
from review_relay.client.storage import (
    JsonFileStorage,
    MemoryStorage,
    ReviewStore,
    StorageBackend,
    StoredReview,
)

__all__ = [
    "JsonFileStorage",
    "MemoryStorage",
    "ReviewSession",
    "ReviewStore",
    "StorageBackend",
    "StoredReview",
    "SubmissionState",
]
