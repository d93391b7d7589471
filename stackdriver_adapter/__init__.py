__version__ = "dev"

from .main import run  # noqa: E402

__all__ = ["run", "__version__"]
