"""
HTML Cleaner Module

Reduces rendered pages to compact HTML, plain text and outbound links.
"""

import re
from typing import List
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Comment

from ..schemas import CleanedPage, PageLink
from ..utils.logger import browser_logger as logger

STRIP_TAGS = ["svg", "script", "style", "noscript"]
MAX_LINK_TEXT = 200


class HTMLCleaner:
    """Turns raw page HTML into the artefacts persisted per page"""

    def clean(self, html: str, url: str) -> CleanedPage:
        soup = BeautifulSoup(html or "", "html.parser")

        title = soup.title.get_text(strip=True) if soup.title else ""
        title = title or "Untitled"

        for tag in soup.find_all(STRIP_TAGS):
            tag.decompose()
        for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
            comment.extract()

        links = self._extract_links(soup, url)

        body = soup.body or soup
        cleaned_html = body.decode_contents() if soup.body else str(soup)
        cleaned_html = re.sub(r"\s+", " ", cleaned_html)
        cleaned_html = re.sub(r">\s+<", "><", cleaned_html).strip()

        plain_text = re.sub(r"\s+", " ", body.get_text(" ")).strip()

        logger.info(
            f"Cleaned: {title} ({len(cleaned_html)} chars, "
            f"{len(plain_text)} chars text, {len(links)} links)"
        )
        return CleanedPage(
            title=title,
            cleaned_html=cleaned_html,
            plain_text=plain_text,
            links=links,
        )

    def _extract_links(self, soup: BeautifulSoup, base_url: str) -> List[PageLink]:
        links: List[PageLink] = []
        seen = set()
        base = urlparse(base_url)

        for anchor in soup.find_all("a", href=True):
            href = anchor["href"].strip()
            if href.startswith(("http://", "https://")):
                absolute_url = href
            elif href.startswith("/") and not href.startswith("//") and base.netloc:
                absolute_url = f"{base.scheme}://{base.netloc}{href}"
            else:
                # fragments, mailto:, tel: and relative paths
                continue

            if absolute_url in seen:
                continue
            seen.add(absolute_url)
            links.append(PageLink(
                url=absolute_url,
                text=anchor.get_text(strip=True)[:MAX_LINK_TEXT],
            ))

        return links
