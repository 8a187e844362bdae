import httpx
import logging
from typing import Optional, List, Dict, Any
from config import FITNESS_API_KEY, FITNESS_API_URL, FITNESS_API_TIMEOUT
from app.services.errors import UpstreamUnavailableError

logger = logging.getLogger(__name__)

WALKING_KEYWORDS = ('walk', 'walking', 'treadmill', 'pace', 'step', 'stride')


def is_walking_related(exercise: Dict[str, Any]) -> bool:
    name = (exercise.get("name") or "").lower()
    instructions = (exercise.get("instructions") or "").lower()
    return any(keyword in name or keyword in instructions for keyword in WALKING_KEYWORDS)


class ExerciseAPIService:
    """Thin client for the external exercise catalog (API Ninjas compatible)."""

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None, timeout: float = FITNESS_API_TIMEOUT):
        self.api_key = api_key or FITNESS_API_KEY
        self.base_url = (base_url or FITNESS_API_URL).rstrip("/")
        self.timeout = timeout
        if not self.api_key:
            logger.warning("FITNESS_API_KEY not set. Exercise API lookups will fall back to built-in walks.")

    def fetch_cardio_exercises(self, difficulty: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Raw cardio exercises from the provider.
        Raises UpstreamUnavailableError on any transport or HTTP failure.
        """
        if not self.api_key:
            raise UpstreamUnavailableError("Exercise API key is not configured")

        params = {"type": "cardio"}
        if difficulty:
            params["difficulty"] = difficulty

        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.get(
                    f"{self.base_url}/exercises",
                    params=params,
                    headers={"X-Api-Key": self.api_key},
                )
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error fetching exercises from provider: {e}")
            raise UpstreamUnavailableError(f"Exercise API unavailable: {e}") from e

        if not isinstance(data, list):
            raise UpstreamUnavailableError("Exercise API returned an unexpected payload")
        return data

    def fetch_walking_exercises(self, difficulty: Optional[str] = None) -> List[Dict[str, Any]]:
        """Walking-related subset of the provider's cardio exercises (possibly empty)."""
        exercises = self.fetch_cardio_exercises(difficulty)
        walking = [e for e in exercises if is_walking_related(e)]
        logger.info(f"[EXERCISE-API] {len(walking)} walking exercises out of {len(exercises)} cardio results")
        return walking

exercise_api_service = ExerciseAPIService()
