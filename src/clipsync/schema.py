from typing import Annotated

from pydantic import BaseModel, Field, StrictStr

from clipsync.models import ClipboardItem

# Signed 64-bit, matching the BIGINT id column. JSON numbers only; "12" or true are rejected.
ItemId = Annotated[int, Field(strict=True, ge=-2**63, le=2**63 - 1)]


class ClipboardRow(BaseModel):
    id: ItemId
    clipboard_data: StrictStr

    @classmethod
    def from_item(cls, item: ClipboardItem) -> "ClipboardRow":
        return cls(id=item.id, clipboard_data=item.value)

    def to_item(self) -> ClipboardItem:
        return ClipboardItem(id=self.id, value=self.clipboard_data)


class DeleteRequest(BaseModel):
    id: ItemId
