from .current import CurrentResourceModel
from .legacy import LegacyResourceModel

__all__ = ["CurrentResourceModel", "LegacyResourceModel"]
