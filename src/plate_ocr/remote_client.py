"""Client for the Plate Recognizer web service.

The service receives the encoded image as a multipart upload and returns
its own ranked list of plate guesses. A single request is made per call;
failures are raised as RemoteServiceError and never retried here.

Example:
    >>> client = PlateRecognizerClient(RemoteConfig(api_key="..."))
    >>> guesses = client.recognize_plate(image_bytes)
    >>> print(guesses[0].plate, guesses[0].score)
    'abc123' 0.9
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from .config_loader import RemoteConfig
from .types import RemoteGuess, RemoteServiceError

logger = logging.getLogger(__name__)


class PlateRecognizerClient:
    """Thin wrapper around the Plate Recognizer plate-reader endpoint.

    Args:
        config: Remote service configuration (must carry an API key).
        session: Optional requests session, created if omitted.

    Raises:
        ValueError: If no API key is configured.
    """

    def __init__(self, config: RemoteConfig, session: Optional[requests.Session] = None):
        if not config.api_key:
            raise ValueError("API key not configured")
        self.config = config
        self.session = session or requests.Session()
        logger.info(f"PlateRecognizerClient initialized: url={config.api_url}")

    def recognize_plate(self, image: bytes, filename: str = "plate.jpg") -> List[RemoteGuess]:
        """Send an image to the service and return its guesses.

        Args:
            image: Encoded image bytes.
            filename: File name reported in the multipart upload.

        Returns:
            Guesses in the order the service ranked them (possibly empty).

        Raises:
            RemoteServiceError: On network errors, timeouts, non-2xx
                responses or malformed payloads.
        """
        data: Dict[str, Any] = {}
        if self.config.regions:
            data["regions"] = list(self.config.regions)

        try:
            with self.session.post(
                self.config.api_url,
                headers={"Authorization": f"Token {self.config.api_key}"},
                files={"upload": (filename, image)},
                data=data,
                timeout=self.config.timeout,
            ) as response:
                if not response.ok:
                    raise RemoteServiceError(
                        self._error_message(response), status_code=response.status_code
                    )
                payload = response.json()
        except requests.RequestException as e:
            raise RemoteServiceError(f"Plate Recognizer request failed: {e}") from e
        except ValueError as e:
            raise RemoteServiceError(f"Invalid Plate Recognizer response: {e}") from e

        logger.debug(f"Plate Recognizer API response: {payload}")
        return self._parse_results(payload)

    def close(self) -> None:
        self.session.close()

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message = body.get("error") or body.get("detail")
            if message:
                return str(message)
        return f"API request failed with status {response.status_code}"

    @staticmethod
    def _parse_results(payload: Any) -> List[RemoteGuess]:
        if not isinstance(payload, dict):
            raise RemoteServiceError("Invalid Plate Recognizer response: not an object")

        guesses = []
        for result in payload.get("results") or []:
            if not isinstance(result, dict):
                continue
            plate = result.get("plate") or ""
            try:
                score = float(result.get("score") or 0.0)
            except (TypeError, ValueError) as e:
                raise RemoteServiceError(
                    f"Invalid Plate Recognizer response: bad score {result.get('score')!r}"
                ) from e
            guesses.append(RemoteGuess(plate=str(plate), score=score))

        if guesses:
            logger.info(
                f"Detected plate: {guesses[0].plate} "
                f"(confidence: {round(guesses[0].score * 100)}%)"
            )
        return guesses
