"""Shared constants for classification configuration.

Constants
---------
MIN_TEMPERATURE : float
    Minimum allowed temperature value for chat completion requests (0.0).
MAX_TEMPERATURE : float
    Maximum allowed temperature value for chat completion requests (2.0).
DEFAULT_CHUNK_SIZE : int
    Number of messages sent to the model per request.

"""

from __future__ import annotations

MIN_TEMPERATURE: float = 0.0
MAX_TEMPERATURE: float = 2.0

DEFAULT_CHUNK_SIZE: int = 25
