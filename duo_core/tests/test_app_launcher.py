from duo_core.agents.app_launcher import AppLauncher


class FakeOpener:
    def __init__(self, installed):
        self.installed = set(installed)
        self.opened = []

    def can_open(self, url):
        return url in self.installed

    def open(self, url):
        self.opened.append(url)


def test_launches_installed_app():
    opener = FakeOpener({"qqmusic://"})
    result = AppLauncher(opener).check_and_launch("帮我打开QQ音乐")
    assert result.app_launched is True
    assert result.response_message == "正在为您打开QQ音乐..."
    assert opener.opened == ["qqmusic://"]


def test_missing_app_reports_install_hint():
    opener = FakeOpener(set())
    result = AppLauncher(opener).check_and_launch("我想听喜马拉雅")
    assert result.app_launched is False
    assert result.response_message == "您似乎没有安装喜马拉雅，请先安装该应用。"
    assert opener.opened == []


def test_no_keyword_returns_none():
    assert AppLauncher(FakeOpener({"qqmusic://"})).check_and_launch("讲个故事") is None


def test_custom_app_table():
    opener = FakeOpener({"bilibili://"})
    result = AppLauncher(opener, apps={"哔哩哔哩": "bilibili://"}).check_and_launch("打开哔哩哔哩")
    assert result.app_launched is True
    assert AppLauncher(opener, apps={}).check_and_launch("打开QQ音乐") is None
