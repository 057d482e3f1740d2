"""Unit tests for the Plate Recognizer client."""

from unittest.mock import MagicMock

import pytest
import requests

from src.plate_ocr.config_loader import RemoteConfig
from src.plate_ocr.remote_client import PlateRecognizerClient
from src.plate_ocr.types import RemoteGuess, RemoteServiceError


def make_response(payload=None, ok=True, status_code=200, json_error=None):
    """Build a mock requests response usable as a context manager."""
    response = MagicMock()
    response.ok = ok
    response.status_code = status_code
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    response.__enter__.return_value = response
    return response


@pytest.fixture
def config():
    return RemoteConfig(api_key="secret-token", timeout=5.0)


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def client(config, session):
    return PlateRecognizerClient(config, session=session)


class TestInitialization:
    """Test client construction."""

    def test_requires_api_key(self):
        """Test a client cannot be built without an API key."""
        with pytest.raises(ValueError, match="API key not configured"):
            PlateRecognizerClient(RemoteConfig())

    def test_creates_session(self, config):
        """Test a requests session is created when none is given."""
        client = PlateRecognizerClient(config)
        assert isinstance(client.session, requests.Session)
        client.close()


class TestRecognizePlate:
    """Test plate recognition requests."""

    def test_request_format(self, client, session, config):
        """Test the upload, auth header and timeout."""
        session.post.return_value = make_response({"results": []})

        client.recognize_plate(b"jpeg-bytes", filename="car.jpg")

        args, kwargs = session.post.call_args
        assert args[0] == config.api_url
        assert kwargs["headers"] == {"Authorization": "Token secret-token"}
        assert kwargs["files"] == {"upload": ("car.jpg", b"jpeg-bytes")}
        assert kwargs["timeout"] == 5.0
        assert kwargs["data"] == {}

    def test_regions_sent(self, session):
        """Test configured regions are sent as form fields."""
        client = PlateRecognizerClient(
            RemoteConfig(api_key="k", regions=["us-ca", "gb"]), session=session
        )
        session.post.return_value = make_response({"results": []})

        client.recognize_plate(b"img")

        assert session.post.call_args.kwargs["data"] == {"regions": ["us-ca", "gb"]}

    def test_parses_results_in_order(self, client, session):
        """Test guesses keep the service's order and values."""
        session.post.return_value = make_response(
            {
                "results": [
                    {"plate": "abc-123", "score": 0.9},
                    {"plate": "abc128", "score": 0.95},
                ]
            }
        )

        guesses = client.recognize_plate(b"img")

        assert guesses == [
            RemoteGuess(plate="abc-123", score=0.9),
            RemoteGuess(plate="abc128", score=0.95),
        ]

    def test_no_results(self, client, session):
        """Test an empty or missing result list gives no guesses."""
        session.post.return_value = make_response({"results": []})
        assert client.recognize_plate(b"img") == []

        session.post.return_value = make_response({"processing_time": 12.5})
        assert client.recognize_plate(b"img") == []

    def test_http_error_with_message(self, client, session):
        """Test non-2xx responses raise with the service message."""
        session.post.return_value = make_response(
            {"detail": "Invalid token."}, ok=False, status_code=403
        )

        with pytest.raises(RemoteServiceError, match="Invalid token.") as exc_info:
            client.recognize_plate(b"img")

        assert exc_info.value.status_code == 403

    def test_http_error_without_body(self, client, session):
        """Test non-2xx responses without JSON still raise."""
        session.post.return_value = make_response(
            ok=False, status_code=502, json_error=ValueError("no json")
        )

        with pytest.raises(RemoteServiceError, match="status 502"):
            client.recognize_plate(b"img")

    @pytest.mark.parametrize(
        "error", [requests.ConnectionError("refused"), requests.Timeout("slow")]
    )
    def test_network_errors(self, client, session, error):
        """Test connection errors and timeouts raise RemoteServiceError."""
        session.post.side_effect = error

        with pytest.raises(RemoteServiceError, match="request failed"):
            client.recognize_plate(b"img")

    def test_invalid_json(self, client, session):
        """Test an unparsable success body raises RemoteServiceError."""
        session.post.return_value = make_response(json_error=ValueError("bad json"))

        with pytest.raises(RemoteServiceError, match="Invalid Plate Recognizer response"):
            client.recognize_plate(b"img")

    def test_non_object_payload(self, client, session):
        """Test a JSON list body is rejected."""
        session.post.return_value = make_response(["abc123"])

        with pytest.raises(RemoteServiceError):
            client.recognize_plate(b"img")

    @pytest.mark.parametrize("bad_score", ["high", [0.9], {"value": 0.9}])
    def test_non_numeric_score(self, client, session, bad_score):
        """Test a score that is not a number raises RemoteServiceError."""
        session.post.return_value = make_response(
            {"results": [{"plate": "abc123", "score": bad_score}]}
        )

        with pytest.raises(RemoteServiceError, match="bad score"):
            client.recognize_plate(b"img")
