"""
JSON file store for working without the marketplace API.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

import pendulum

from ..domain.exceptions import GatewayError

logger = logging.getLogger(__name__)


class FileStore:
    """
    Store that keeps availability in a local JSON document.

    Layout:
    {
        "tutors": {
            "42": {
                "availability": [{"day_of_week": "Monday", "start_time": "09:00", ...}],
                "change_requests": [...]
            }
        }
    }

    Useful for trying the tool without a running backend (``--mock``).
    """

    def __init__(self, data_file: Path):
        self.data_file = Path(data_file)

    def load_records(self, tutor_id: int) -> List[Dict[str, Any]]:
        return list(self._tutor(self._read(), tutor_id).get("availability", []))

    def save_records(self, tutor_id: int, records: List[Dict[str, str]]) -> None:
        data = self._read()
        self._tutor(data, tutor_id)["availability"] = list(records)
        self._write(data)

    def list_change_requests(self, tutor_id: int) -> List[Dict[str, Any]]:
        return list(self._tutor(self._read(), tutor_id).get("change_requests", []))

    def create_change_request(self, tutor_id: int, payload: Dict[str, str]) -> Dict[str, Any]:
        data = self._read()
        requests = self._tutor(data, tutor_id).setdefault("change_requests", [])
        saved = {
            **payload,
            "id": max((r.get("id", 0) for r in requests), default=0) + 1,
            "status": "pending",
            "admin_notes": None,
            "created_at": pendulum.now("UTC").to_iso8601_string(),
        }
        requests.append(saved)
        self._write(data)
        return saved

    @staticmethod
    def _tutor(data: Dict[str, Any], tutor_id: int) -> Dict[str, Any]:
        return data.setdefault("tutors", {}).setdefault(str(tutor_id), {})

    def _read(self) -> Dict[str, Any]:
        if not self.data_file.exists():
            return {}

        try:
            with open(self.data_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise GatewayError(f"Could not read {self.data_file}: {exc}") from exc

        if not isinstance(data, dict):
            raise GatewayError(f"{self.data_file} must contain a JSON object at the root level.")
        return data

    def _write(self, data: Dict[str, Any]) -> None:
        try:
            self.data_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.data_file, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
        except OSError as exc:
            raise GatewayError(f"Could not write {self.data_file}: {exc}") from exc
        logger.debug("Wrote availability data to %s", self.data_file)
