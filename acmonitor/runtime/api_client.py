from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

import requests

from acmonitor.domain.errors import StorageUnavailable, ValidationError
from acmonitor.domain.models import Measurements, Reading
from acmonitor.ingest.validation import parse_reading


@dataclass(frozen=True)
class ApiClientConfig:
    """
    Connection settings for the monitor HTTP API.

    Parameters
    ----------
    base_url
        Server root, e.g. "http://192.168.98.1:3000".
    timeout_s
        Per-request timeout in seconds.
    """

    base_url: str = "http://127.0.0.1:3000"
    timeout_s: float = 5.0


class MonitorApiClient:
    """
    HTTP client for the monitor server (query, ingestion and alert endpoints).

    Error mapping
    -------------
    - Connection errors, timeouts and 5xx on the query/ingest path ->
      :class:`StorageUnavailable`
    - 4xx from the ingest/alert endpoints -> :class:`ValidationError`
    """

    def __init__(self, cfg: ApiClientConfig, session: requests.Session | None = None):
        self._cfg = cfg
        self._session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self._cfg.base_url.rstrip('/')}{path}"

    def fetch_latest(self, limit: int = 1) -> List[Reading]:
        """
        Fetch the newest readings (newest first).

        Raises
        ------
        StorageUnavailable
            If the server cannot be reached or fails with a 5xx status.
        """
        try:
            r = self._session.get(self._url("/api/data"), params={"limit": limit}, timeout=self._cfg.timeout_s)
        except requests.RequestException as e:
            raise StorageUnavailable(f"Failed to connect to the sensor API: {e}") from e

        if r.status_code >= 500:
            raise StorageUnavailable(f"Sensor API error: HTTP {r.status_code}")
        r.raise_for_status()

        data = r.json()
        if not isinstance(data, list):
            raise StorageUnavailable("Sensor API returned an unexpected body")
        return [parse_reading(obj) for obj in data[:limit]]

    def post_reading(self, meas: Measurements) -> Reading:
        """
        Post a new sample to the ingestion endpoint.

        Raises
        ------
        StorageUnavailable
            If the server cannot be reached or fails with a 5xx status.
        ValidationError
            If the server rejects the body.
        """
        body = {"voltage": meas.voltage, "current": meas.current, "power": meas.power}
        try:
            r = self._session.post(self._url("/data"), json=body, timeout=self._cfg.timeout_s)
        except requests.RequestException as e:
            raise StorageUnavailable(f"Failed to reach ingestion endpoint: {e}") from e

        if r.status_code >= 500:
            raise StorageUnavailable(f"Ingestion endpoint error: HTTP {r.status_code}")
        if r.status_code >= 400:
            err = _json_or_empty(r)
            raise ValidationError(str(err.get("error", f"HTTP {r.status_code}")), field=err.get("field"))
        return parse_reading(r.json())

    def send_alert(self, reading: Reading) -> Dict[str, Any]:
        """
        Ask the server-side gatekeeper to check a reading.

        Returns
        -------
        dict
            Server response body. A 502 (delivery failed) is returned as a body,
            not raised, so the caller can show it.

        Raises
        ------
        requests.RequestException
            On connection errors or statuses other than 2xx/502.
        """
        r = self._session.post(self._url("/send-alert"), json=reading.to_dict(), timeout=self._cfg.timeout_s)
        if r.status_code == 502:
            return _json_or_empty(r)
        r.raise_for_status()
        return _json_or_empty(r)

    def close(self) -> None:
        self._session.close()


def _json_or_empty(r: requests.Response) -> Dict[str, Any]:
    try:
        data = r.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
