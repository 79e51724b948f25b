import platform
import re
from dataclasses import dataclass

from extshim.core.settings import Settings


@dataclass(frozen=True)
class ExtensionInfo:
    id: str
    version: str

    @classmethod
    def from_settings(cls, settings: Settings) -> "ExtensionInfo":
        return cls(id=settings.extension.id, version=settings.extension.version)

    def url(self, path: str) -> str:
        return extension_url(self.id, path)


def get_platform() -> str:
    """Lower-case OS name, e.g. 'linux', 'darwin', 'windows'."""
    return platform.system().lower()


def extension_url(extension_id: str, path: str) -> str:
    if ":" in path:
        return path
    return f"chrome://{extension_id}/" + re.sub(r"^\./", "", path)


__all__ = ["ExtensionInfo", "extension_url", "get_platform"]
