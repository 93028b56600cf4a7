from clipsync.api.main import create_app
from clipsync.api.units import ClipboardUnit, UnitRegistry

__all__ = [
    'ClipboardUnit',
    'UnitRegistry',
    'create_app',
]
