from dataclasses import dataclass
from typing import Any, Dict

IMAGE_PREFIX = "data:image/"


@dataclass(frozen=True)
class ClipboardItem:
	"""Immutable clipboard item shared by the local store, the engine and the wire."""
	id: int
	value: str

	@property
	def is_image(self) -> bool:
		return self.value.startswith(IMAGE_PREFIX)

	def to_dict(self) -> Dict[str, Any]:
		return {"id": self.id, "value": self.value}

	@classmethod
	def from_dict(cls, data: Dict[str, Any]) -> "ClipboardItem":
		return cls(id=int(data["id"]), value=str(data["value"]))
