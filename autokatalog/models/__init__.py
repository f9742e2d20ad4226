from .auto import Auto, AutoArt, Bezeichnung, Zubehoer

__all__ = [
    "Auto",
    "AutoArt",
    "Bezeichnung",
    "Zubehoer",
]
