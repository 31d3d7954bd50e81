from __future__ import annotations

from typing import Callable

import pytest
import requests


class _DummyResponse:
    def __init__(self, content: bytes, status_code: int = 200, reason: str = "OK") -> None:
        self.content = content
        self.text = content.decode("utf-8")
        self.status_code = status_code
        self.reason = reason


def _story_rows(item_id: int, title: str, url: str, *, legacy: bool) -> str:
    if legacy:
        title_cell = f'<td class="title"><a href="{url}">{title}</a><span class="comhead"> (example.com) </span></td>'
    else:
        title_cell = (
            '<td class="title"><span class="titleline">'
            f'<a href="{url}">{title}</a>'
            '<span class="sitebit comhead"> (<a href="from?site=example.com"><span class="sitestr">example.com</span></a>)</span>'
            "</span></td>"
        )
    return f"""
      <tr class="athing submission" id="{item_id}">
        <td align="right" valign="top" class="title"><span class="rank">{item_id}.</span></td>
        <td valign="top" class="votelinks"><center><a id="up_{item_id}" href="vote?id={item_id}&amp;how=up&amp;goto=news"><div class="votearrow" title="upvote"></div></a></center></td>
        {title_cell}
      </tr>
      <tr>
        <td colspan="2"></td>
        <td class="subtext"><span class="subline">
          <span class="score" id="score_{item_id}">120 points</span> by <a href="user?id=gopher" class="hnuser">gopher</a>
          <span class="age"><a href="item?id={item_id}">3 hours ago</a></span>
          | <a href="hide?id={item_id}&amp;goto=news">hide</a>
          | <a href="item?id={item_id}">57&nbsp;comments</a>
        </span></td>
      </tr>
      <tr class="spacer" style="height:5px"></tr>
    """


def build_front_page(stories: list[tuple[int, str, str]], *, legacy: bool = False) -> str:
    rows = "".join(_story_rows(item_id, title, url, legacy=legacy) for item_id, title, url in stories)
    return f"""<html><head><title>Hacker News</title></head><body><center>
    <table id="hnmain"><tr><td>
      <table border="0" cellpadding="0" cellspacing="0">
        {rows}
        <tr class="morespace" style="height:10px"></tr>
        <tr><td colspan="2"></td><td class="title"><a href="?p=2" class="morelink" rel="next">More</a></td></tr>
      </table>
    </td></tr></table>
    </center></body></html>"""


@pytest.fixture()
def serve_page(monkeypatch: pytest.MonkeyPatch) -> Callable[..., list[str]]:
    """Patch requests.get to return the given page; returns the list of fetched URLs."""

    def _install(html: str = "", *, status_code: int = 200, reason: str = "OK", error: Exception | None = None) -> list[str]:
        calls: list[str] = []

        def _fake_get(url: str, *args, **kwargs) -> _DummyResponse:
            calls.append(url)
            if error is not None:
                raise error
            return _DummyResponse(html.encode("utf-8"), status_code=status_code, reason=reason)

        monkeypatch.setattr("requests.get", _fake_get)
        return calls

    return _install


@pytest.fixture()
def connection_error() -> requests.ConnectionError:
    return requests.ConnectionError("connection refused")


@pytest.fixture()
def make_front_page() -> Callable[..., str]:
    return build_front_page
