import os
import re
import json
from typing import Dict, Any, List, Optional
from .config import settings
from .logger import storage_logger as logger


class StorageService:
    """Centralized service for handling all firm-scoped file operations"""

    PAGE_DIRS = ["raw_pages", "cleaned_pages", "plain_text", "extracted_links"]

    def __init__(self, base_dir: Optional[str] = None):
        self.base_dir = base_dir or settings.DATA_DIR
        self.firms_dir = os.path.join(self.base_dir, "firms")
        os.makedirs(self.firms_dir, exist_ok=True)

    def get_firm_slug(self, firm_name: str) -> str:
        """Filesystem-safe identifier derived from a firm's name"""
        slug = re.sub(r"[^a-z0-9]+", "-", firm_name.lower())
        return slug.strip("-")

    def get_firm_dir(self, firm_slug: str) -> str:
        return os.path.join(self.firms_dir, firm_slug)

    def firm_exists(self, firm_slug: str) -> bool:
        return os.path.isdir(self.get_firm_dir(firm_slug))

    def list_firm_slugs(self) -> List[str]:
        return sorted(
            name for name in os.listdir(self.firms_dir)
            if os.path.isdir(os.path.join(self.firms_dir, name))
        )

    def save_page(self, firm_slug: str, page_id: str, raw_html: Optional[str], cleaned: Optional[Dict[str, Any]]) -> None:
        """Persist the raw HTML and cleaned outputs of one scraped page"""
        firm_dir = self.get_firm_dir(firm_slug)
        for sub in self.PAGE_DIRS:
            os.makedirs(os.path.join(firm_dir, sub), exist_ok=True)

        if raw_html:
            self._write_text(os.path.join(firm_dir, "raw_pages", f"{page_id}.html"), raw_html)

        if cleaned:
            self._write_text(
                os.path.join(firm_dir, "cleaned_pages", f"{page_id}.html"),
                cleaned.get("cleaned_html", ""),
            )
            if cleaned.get("plain_text"):
                self._write_text(
                    os.path.join(firm_dir, "plain_text", f"{page_id}.txt"),
                    cleaned["plain_text"],
                )
            if cleaned.get("links"):
                self._save_json(
                    cleaned["links"],
                    os.path.join(firm_dir, "extracted_links", f"{page_id}.json"),
                )

        logger.info(f"Saved page {page_id} for {firm_slug}")

    def save_linkedin_queue(self, firm_slug: str, linkedin_urls: List[Dict[str, Any]]) -> str:
        path = self.save_json(firm_slug, "linkedin_queue.json", linkedin_urls)
        logger.info(f"Saved {len(linkedin_urls)} LinkedIn URLs for {firm_slug}")
        return path

    def save_page_analysis(self, firm_slug: str, page_id: str, analysis: Dict[str, Any]) -> str:
        return self.save_json(firm_slug, os.path.join("page_analyses", f"{page_id}.json"), analysis)

    def save_json(self, firm_slug: str, relative_path: str, data: Any) -> str:
        """Save a JSON artefact under the firm directory"""
        filepath = os.path.join(self.get_firm_dir(firm_slug), relative_path)
        return self._save_json(data, filepath)

    def load_json(self, firm_slug: str, relative_path: str) -> Optional[Any]:
        """Load a JSON artefact; None when it has not been produced yet"""
        filepath = os.path.join(self.get_firm_dir(firm_slug), relative_path)
        if not os.path.exists(filepath):
            return None
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading file {filepath}: {str(e)}")
            return None

    def load_extracted_links(self, firm_slug: str) -> List[Dict[str, Any]]:
        """Concatenate every page's extracted links"""
        links: List[Dict[str, Any]] = []
        for item in self._load_dir(firm_slug, "extracted_links"):
            links.extend(item)
        return links

    def load_page_analyses(self, firm_slug: str) -> List[Dict[str, Any]]:
        return self._load_dir(firm_slug, "page_analyses")

    def save_batch_results(self, results: List[Dict[str, Any]], filename: str = "batch_results.json") -> str:
        return self._save_json(results, os.path.join(self.base_dir, filename))

    def _load_dir(self, firm_slug: str, sub_dir: str) -> List[Any]:
        directory = os.path.join(self.get_firm_dir(firm_slug), sub_dir)
        if not os.path.isdir(directory):
            return []

        items = []
        for filename in sorted(os.listdir(directory)):
            if not filename.endswith(".json"):
                continue
            data = self.load_json(firm_slug, os.path.join(sub_dir, filename))
            if data is not None:
                items.append(data)
        return items

    def _write_text(self, filepath: str, content: str) -> None:
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(content)

    def _save_json(self, data: Any, filepath: str) -> str:
        """Save JSON data to file"""
        try:
            os.makedirs(os.path.dirname(filepath), exist_ok=True)
            with open(filepath, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            logger.debug(f"Saved data to {filepath}")
            return filepath
        except OSError as e:
            logger.error(f"Error saving to {filepath}: {str(e)}")
            raise
