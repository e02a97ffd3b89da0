# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
import logging

import httpx

from urllib.parse import parse_qs, urlparse
from bs4 import BeautifulSoup, Comment
from pydantic import Field

from .base_tool import BaseTool
from ..config import settings
from ..types.tool_types import ToolResult

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

MAX_FETCH_CHARS = 50_000
SEARCH_URL = "https://html.duckduckgo.com/html/"
USER_AGENT = "Mozilla/5.0 (compatible; agent-cli/0.1)"


def html_to_text(page: str) -> str:
    """The visible text of an HTML page, one block per line."""
    soup = BeautifulSoup(page, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()

    lines = (line.strip() for line in soup.get_text("\n").splitlines())
    return "\n".join(line for line in lines if line)


def result_url(href: str) -> str:
    """DuckDuckGo wraps result links in a redirect; return the target."""
    parsed = urlparse(href)
    target = parse_qs(parsed.query).get("uddg")
    if target:
        return target[0]
    if href.startswith("//"):
        return f"https:{href}"
    return href


def parse_search_results(page: str, max_results: int) -> list[dict[str, str]]:
    soup = BeautifulSoup(page, "html.parser")
    results = []
    for element in soup.select(".result"):
        link = element.select_one(".result__a")
        if link is None:
            continue
        title = link.get_text(" ", strip=True)
        href = link.get("href") or ""
        if not title or not href:
            continue
        snippet = element.select_one(".result__snippet")
        results.append(
            {
                "title": title,
                "url": result_url(href),
                "snippet": snippet.get_text(" ", strip=True) if snippet is not None else "",
            }
        )
        if len(results) >= max_results:
            break
    return results


class WebFetch(BaseTool):
    TOOL_NAME = "WebFetch"
    TOOL_DESCRIPTION = """Fetch a URL over HTTP(S) and return its content as text.

HTML pages are reduced to their text. Use this to read documentation or other
web pages the task refers to.
"""

    url: str = Field(..., description="The http:// or https:// URL to fetch", min_length=1)

    async def run(self) -> ToolResult:
        if not self.url.startswith(("http://", "https://")):
            return self.error(f"Only http and https URLs are supported: {self.url}")

        try:
            async with httpx.AsyncClient(follow_redirects=True) as client:
                response = await client.get(self.url, timeout=settings.WEB_FETCH_TIMEOUT)
        except httpx.TimeoutException:
            return self.error(f"Timed out after {settings.WEB_FETCH_TIMEOUT:g}s fetching {self.url}")
        except httpx.HTTPError as e:
            return self.error(f"Failed to fetch {self.url}: {e}")

        if response.status_code >= 400:
            return self.error(f"{self.url} returned HTTP {response.status_code}")

        content_type = response.headers.get("content-type", "")
        text = response.text
        if "html" in content_type:
            text = html_to_text(text)

        if len(text) > MAX_FETCH_CHARS:
            text = text[:MAX_FETCH_CHARS] + f"\n\n... [content truncated, {len(text) - MAX_FETCH_CHARS} characters omitted]"
        return self.result(f"Content of {response.url} ({content_type or 'unknown type'}):\n\n{text}")


class WebSearch(BaseTool):
    TOOL_NAME = "WebSearch"
    TOOL_DESCRIPTION = """Search the web with DuckDuckGo and return the titles, URLs and snippets of the top results.

Use specific keywords. Follow up with WebFetch to read a result in full.
"""

    query: str = Field(..., description="The search query", min_length=1)
    max_results: int = Field(default=5, description="How many results to return", ge=1, le=20)

    async def run(self) -> ToolResult:
        query = self.query.strip()
        if not query:
            return self.error("The search query is empty")

        try:
            async with httpx.AsyncClient(follow_redirects=True) as client:
                response = await client.get(
                    SEARCH_URL,
                    params={"q": query},
                    headers={"User-Agent": USER_AGENT},
                    timeout=settings.WEB_FETCH_TIMEOUT,
                )
        except httpx.TimeoutException:
            return self.error(f"Search timed out after {settings.WEB_FETCH_TIMEOUT:g}s")
        except httpx.HTTPError as e:
            return self.error(f"Search failed: {e}")

        if response.status_code >= 400:
            return self.error(f"Search returned HTTP {response.status_code}")

        results = parse_search_results(response.text, self.max_results)
        if not results:
            return self.result(f'No results found for "{query}"')

        lines = [f'Search results for "{query}":', ""]
        for i, result in enumerate(results, 1):
            lines.append(f"{i}. {result['title']}")
            lines.append(f"   URL: {result['url']}")
            if result["snippet"]:
                lines.append(f"   {result['snippet']}")
            lines.append("")
        lines.append(f"---\n{len(results)} results")
        return self.result("\n".join(lines))
