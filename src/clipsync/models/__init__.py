from .clipboarditem import ClipboardItem

__all__ = ["ClipboardItem"]
