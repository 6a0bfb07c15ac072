from pathlib import Path

__all__ = [
    "__version__",
    "VERSION_PATH",
]

VERSION_PATH = Path(__file__).parent / "VERSION"

with open(VERSION_PATH, "r") as vf:
    __version__ = vf.read().strip()
