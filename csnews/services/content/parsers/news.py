"""
News parsers: homepage headlines, RSS feed, Google News sitemap.

URL patterns:
  homepage: hltv.org/ (.standard-headline, .featured-news-container)
  feed: hltv.org/rss/news
  sitemap: hltv.org/news-sitemap.xml (first 20 <url> entries)
"""

from __future__ import annotations

import logging
import warnings
from urllib.parse import urljoin

import feedparser
from bs4 import BeautifulSoup, XMLParsedAsHTMLWarning

from ....storage.models import NewsArticle
from ....utils.time import clock_label_from, format_clock

logger = logging.getLogger("csnews.services.content.parsers.news")

SITEMAP_LIMIT = 20


def parse_news_homepage(html: str, base_url: str) -> list[NewsArticle]:
    """Standard headlines followed by featured articles."""
    soup = BeautifulSoup(html, "html.parser")
    articles: list[NewsArticle] = []

    for link in soup.select(".standard-headline"):
        try:
            time_el = link.select_one(".time")
            time_text = time_el.get_text(strip=True) if time_el else ""
            title = link.get_text(" ", strip=True)
            if time_text and title.endswith(time_text):
                title = title[: -len(time_text)].strip()
            if not title:
                continue
            articles.append(NewsArticle(
                title=title,
                url=urljoin(base_url, link.get("href") or ""),
                time=time_text or format_clock(),
                type="standard",
            ))
        except Exception:
            logger.debug("Failed to parse headline", exc_info=True)

    for link in soup.select(".featured-news-container a.featured-newslink"):
        try:
            title_el = link.select_one(".featured-news-title")
            if title_el is None or not title_el.get_text(strip=True):
                continue
            img = link.select_one("img")
            articles.append(NewsArticle(
                title=title_el.get_text(strip=True),
                url=urljoin(base_url, link.get("href") or ""),
                time=format_clock(),
                type="featured",
                image=img.get("src") if img else None,
            ))
        except Exception:
            logger.debug("Failed to parse featured article", exc_info=True)

    return articles


def parse_news_feed(text: str) -> list[NewsArticle]:
    """RSS items as standard articles. feedparser is synchronous; run in a thread."""
    feed = feedparser.parse(text)
    articles: list[NewsArticle] = []
    for entry in feed.entries:
        articles.append(NewsArticle(
            title=entry.get("title", ""),
            url=entry.get("link", ""),
            time=clock_label_from(entry.get("published")),
            type="standard",
        ))
    return articles


def _title_from_url(url: str) -> str:
    slug = url.rstrip("/").rsplit("/", 1)[-1].replace("-", " ")
    return slug[:1].upper() + slug[1:]


def parse_news_sitemap(xml: str) -> list[NewsArticle]:
    """First 20 sitemap URLs; <news:title> when present, else the URL slug."""
    # html.parser lower-cases tag names and keeps the "news:" prefix, which
    # the lookups below rely on; the XML-as-HTML warning is expected here
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", XMLParsedAsHTMLWarning)
        soup = BeautifulSoup(xml, "html.parser")
    articles: list[NewsArticle] = []

    for node in soup.find_all("url")[:SITEMAP_LIMIT]:
        loc = node.find("loc")
        if loc is None:
            continue
        url = loc.get_text(strip=True)
        lastmod = node.find("lastmod")
        news_title = node.find("news:title")

        title = news_title.get_text(strip=True) if news_title else ""
        if not title:
            title = _title_from_url(url)
        else:
            title = title[:1].upper() + title[1:]

        articles.append(NewsArticle(
            title=title,
            url=url,
            time=clock_label_from(lastmod.get_text(strip=True) if lastmod else None),
            type="standard",
        ))

    return articles
