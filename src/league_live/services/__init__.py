"""Write-side services: score recording and game lifecycle."""

from .games import GameLifecycleService
from .scoring import ScoreRecordingService

__all__ = ["GameLifecycleService", "ScoreRecordingService"]
