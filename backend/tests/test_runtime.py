import pytest

from extshim.core.settings import Settings
from extshim.services.runtime import ExtensionInfo, extension_url, get_platform


@pytest.mark.parametrize(
    "path, expected",
    [
        ("./lib/pages/options.html", "chrome://adguard/lib/pages/options.html"),
        ("lib/filter.js", "chrome://adguard/lib/filter.js"),
        ("https://adguard.com/forward.html", "https://adguard.com/forward.html"),
        ("chrome://other/skin/icon.png", "chrome://other/skin/icon.png"),
    ],
)
def test_extension_url(path, expected):
    assert extension_url("adguard", path) == expected


def test_extension_info_from_settings():
    settings = Settings.model_validate({"extension": {"id": "myext", "version": "3.4.1"}})
    info = ExtensionInfo.from_settings(settings)
    assert info == ExtensionInfo(id="myext", version="3.4.1")
    assert info.url("./background.html") == "chrome://myext/background.html"


def test_platform_is_lower_case():
    assert get_platform() == get_platform().lower()
