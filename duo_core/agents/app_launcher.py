"""按关键词唤起第三方应用。

指令中包含已知应用名时，通过 URL Scheme 打开对应应用。
打开动作本身由平台实现的 UrlOpener 完成。
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Protocol

from duo_core.infrastructure.logging.logger import log_event

DEFAULT_APPS: Dict[str, str] = {
    "QQ音乐": "qqmusic://",
    "网易云音乐": "orpheuswidget://",
    "喜马拉雅": "iting://open",
}


class UrlOpener(Protocol):
    def can_open(self, url: str) -> bool:
        ...

    def open(self, url: str) -> None:
        ...


@dataclass(frozen=True)
class AppLaunchResult:
    app_launched: bool
    response_message: str


class AppLauncher:
    def __init__(self, opener: UrlOpener, apps: Optional[Dict[str, str]] = None):
        self._opener = opener
        self._apps = dict(apps if apps is not None else DEFAULT_APPS)

    def check_and_launch(self, command: str) -> Optional[AppLaunchResult]:
        """命令中没有应用关键词时返回 None。"""

        for app_name, url in self._apps.items():
            if app_name in command:
                return self._launch(app_name, url)
        return None

    def _launch(self, app_name: str, url: str) -> AppLaunchResult:
        if not self._opener.can_open(url):
            log_event(logging.INFO, "App not installed", {}, app=app_name, url=url)
            return AppLaunchResult(False, f"您似乎没有安装{app_name}，请先安装该应用。")
        self._opener.open(url)
        log_event(logging.INFO, "App launched", {}, app=app_name, url=url)
        return AppLaunchResult(True, f"正在为您打开{app_name}...")
