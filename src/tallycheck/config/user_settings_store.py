from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

DEFAULT_POINTER_DIR = Path(os.getenv("TALLYCHECK_HOME", str(Path.home() / ".tallycheck"))).expanduser()
DEFAULT_SETTINGS_FILENAME = "user_settings.json"

DEFAULT_SETTINGS: Dict[str, Any] = {
	"default_token_minutes": 15,
	"enforce_single_active_token": True,
	"app_data_dir": str(DEFAULT_POINTER_DIR),
}


@dataclass
class UserSettingsStore:
	"""Load and persist lecturer preferences in a JSON file."""

	pointer_dir: Path = field(default_factory=lambda: DEFAULT_POINTER_DIR)
	settings_filename: str = DEFAULT_SETTINGS_FILENAME
	_data: Dict[str, Any] = field(init=False, default_factory=dict)
	app_data_dir: Path = field(init=False)
	settings_file: Path = field(init=False)

	def __post_init__(self) -> None:
		self.pointer_dir = Path(self.pointer_dir).expanduser()
		self.reload()

	# ------------------------------------------------------------------
	# Public API
	# ------------------------------------------------------------------
	@property
	def data(self) -> Dict[str, Any]:
		return dict(self._data)

	def get(self, key: str, default: Any = None) -> Any:
		return self._data.get(key, default)

	def reload(self) -> None:
		pointer_path = self.pointer_dir / self.settings_filename
		pointer_data = self._load_json(pointer_path)

		app_data_raw = pointer_data.get("app_data_dir") or str(self.pointer_dir)
		self.app_data_dir = Path(app_data_raw).expanduser()

		self.settings_file = self.app_data_dir / self.settings_filename
		file_data = self._load_json(self.settings_file) if self.settings_file != pointer_path else {}

		combined = dict(DEFAULT_SETTINGS)
		combined.update(pointer_data)
		combined.update(file_data)
		combined["app_data_dir"] = str(self.app_data_dir)
		self._data = combined

	def update(self, **kwargs: Any) -> Dict[str, Any]:
		new_data = dict(self._data)

		if kwargs.get("app_data_dir"):
			new_dir = Path(kwargs.pop("app_data_dir")).expanduser()
			new_data["app_data_dir"] = str(new_dir)
			self.app_data_dir = new_dir
			self.settings_file = self.app_data_dir / self.settings_filename

		for key, value in kwargs.items():
			if key in DEFAULT_SETTINGS:
				new_data[key] = value

		self._data = new_data
		self._persist()
		return dict(self._data)

	# ------------------------------------------------------------------
	# Internal helpers
	# ------------------------------------------------------------------
	def _persist(self) -> None:
		self.pointer_dir.mkdir(parents=True, exist_ok=True)
		self.app_data_dir.mkdir(parents=True, exist_ok=True)

		pointer_path = self.pointer_dir / self.settings_filename
		with pointer_path.open("w", encoding="utf-8") as handle:
			json.dump(self._data, handle, indent=2)

		if self.settings_file != pointer_path:
			with self.settings_file.open("w", encoding="utf-8") as handle:
				json.dump(self._data, handle, indent=2)

	@staticmethod
	def _load_json(path: Path) -> Dict[str, Any]:
		if not path.exists():
			return {}
		try:
			with path.open("r", encoding="utf-8") as handle:
				data = json.load(handle)
		except (OSError, json.JSONDecodeError) as exc:
			logger.warning("Ignoring unreadable settings file %s: %s", path, exc)
			return {}
		return data if isinstance(data, dict) else {}
