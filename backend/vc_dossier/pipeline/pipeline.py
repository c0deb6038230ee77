"""
Pipeline Module

Runs one SEBI-registered firm at a time through the dossier phases and
persists every intermediate artefact under data/firms/<slug>/.

Phases:
1. URL discovery and news intelligence
2. Regular / LinkedIn URL classification
3. Page scraping, cleaning and per-page analysis
4. LinkedIn harvesting from scraped links
5. LinkedIn prioritization
6. LinkedIn profile and company scraping
7. GP discovery and enrichment
8. Report synthesis and GP background enhancement
"""

import time
import asyncio
from typing import Dict, Any, List, Optional, Tuple

from ..agents import (
    DiscoveryAgent,
    NewsAgent,
    PageAnalyzer,
    LinkPrioritizationAgent,
    GPDiscoveryService,
    GPEnrichmentAgent,
    SynthesisAgent,
    GPBackgroundEnhancer,
)
from ..agents.gp_discovery import filter_gp_names
from ..schemas import (
    DiscoveryResult,
    FirmRecord,
    FirmReport,
    FirmResult,
    KnowledgeBase,
    LinkedInCompany,
    LinkedInProfile,
    NewsInsights,
    PageAnalysis,
    PrioritizedLink,
)
from ..services import BrowserScraper, HTMLCleaner, LLMService, SearchService, get_linkedin_scraper
from ..services.linkedin import LinkedInScraper
from ..utils.config import settings
from ..utils.logger import pipeline_logger as logger
from ..utils.storage import StorageService
from ..utils.url_utils import classify_urls, dedupe_links, detect_page_type, is_linkedin, split_linkedin_urls

PROFILES_FILE = "linkedin_scraped_profiles.json"
COMPANIES_FILE = "linkedin_scraped_companies.json"
GP_PROFILES_FILE = "linkedin_gp_profiles.json"
PRIORITIZED_FILE = "linkedin_prioritized.json"
REPORT_FILE = "final_report.json"


class VCScraperPipeline:
    """
    Orchestrates the per-firm workflow.

    Every collaborator can be injected; the defaults are built from settings.
    """

    def __init__(
        self,
        storage: Optional[StorageService] = None,
        llm: Optional[LLMService] = None,
        search: Optional[SearchService] = None,
        browser: Optional[BrowserScraper] = None,
        cleaner: Optional[HTMLCleaner] = None,
        linkedin: Optional[LinkedInScraper] = None,
        page_delay: Optional[float] = None,
        firm_delay: Optional[float] = None,
        min_importance: Optional[int] = None,
        enhance_gp_backgrounds: Optional[bool] = None,
    ):
        self.storage = storage or StorageService()
        self.llm = llm or LLMService()
        self.search = search or SearchService()
        self.browser = browser or BrowserScraper()
        self.cleaner = cleaner or HTMLCleaner()
        self.linkedin = linkedin or get_linkedin_scraper()

        self.discovery_agent = DiscoveryAgent(self.llm)
        self.news_agent = NewsAgent(self.llm)
        self.page_analyzer = PageAnalyzer(self.llm)
        self.prioritizer = LinkPrioritizationAgent(self.llm)
        self.gp_discovery = GPDiscoveryService()
        self.gp_enrichment = GPEnrichmentAgent(self.llm, self.search, self.linkedin)
        self.synthesizer = SynthesisAgent(self.llm)
        self.gp_enhancer = GPBackgroundEnhancer(self.llm)

        self.page_delay = settings.PAGE_DELAY if page_delay is None else page_delay
        self.firm_delay = settings.FIRM_DELAY if firm_delay is None else firm_delay
        self.min_importance = settings.LINKEDIN_MIN_IMPORTANCE if min_importance is None else min_importance
        self.enhance_gp_backgrounds = (
            settings.ENHANCE_GP_BACKGROUNDS if enhance_gp_backgrounds is None else enhance_gp_backgrounds
        )

        logger.info(f"Pipeline initialized (LinkedIn provider: {self.linkedin.provider})")

    async def process_firm(self, record: FirmRecord) -> FirmResult:
        """
        Run every phase for one firm.

        Any exception aborts the firm and is reported in the returned result.
        """
        slug = self.storage.get_firm_slug(record.name)
        start = time.monotonic()
        logger.info("=" * 80)
        logger.info(f"Processing: {record.name}")
        logger.info("=" * 80)

        try:
            logger.info("PHASE 1: URL discovery and news")
            discovery = await self.discovery_agent.execute(record)
            self.storage.save_json(slug, "discovery.json", discovery.model_dump())
            news = await self.news_agent.execute(record)
            self.storage.save_json(slug, "news.json", news.model_dump())

            logger.info("PHASE 2: URL classification")
            discovered = [url.model_dump() for url in discovery.urls]
            regular, linkedin_queue = classify_urls(discovered)
            regular = dedupe_links(regular)
            if not regular:
                regular = await self._homepage_fallback(record)
            logger.info(f"Regular URLs: {len(regular)}, LinkedIn URLs: {len(linkedin_queue)}")
            self.storage.save_linkedin_queue(slug, linkedin_queue)

            logger.info("PHASE 3: Scraping and analyzing regular pages")
            page_analyses = await self._scrape_pages(slug, regular)

            logger.info("PHASE 4: Harvesting LinkedIn URLs from scraped pages")
            harvested = [link for link in self.storage.load_extracted_links(slug) if is_linkedin(link.get("url"))]
            all_linkedin = linkedin_queue + harvested
            logger.info(f"Total LinkedIn URLs: {len(all_linkedin)} ({len(harvested)} from pages)")

            logger.info("PHASE 5: Prioritizing LinkedIn URLs")
            prioritized = await self.prioritizer.execute(all_linkedin, record.name, self._firm_info(record))
            high_value = [link for link in prioritized if link.importance >= self.min_importance]
            self.storage.save_json(slug, PRIORITIZED_FILE, [link.model_dump() for link in high_value])
            logger.info(f"Prioritized: {len(high_value)} high-value links (score >= {self.min_importance})")

            report, stats = await self._complete(
                record, slug, page_analyses, high_value, discovery=discovery, news=news, reuse_existing=False
            )
        except Exception as e:
            logger.error(f"Pipeline failed for {record.name}: {str(e)}", exc_info=True)
            return FirmResult(success=False, firm_name=record.name, firm_slug=slug, error=str(e))

        stats.update({
            "regular_urls": len(regular),
            "linkedin_urls": len(all_linkedin),
            "scraped_pages": len(page_analyses),
            "duration_minutes": round((time.monotonic() - start) / 60, 2),
        })
        logger.info(f"PIPELINE COMPLETE for {report.firm_name}: {stats}")
        return FirmResult(success=True, firm_name=record.name, firm_slug=slug, report=report, stats=stats)

    async def resume_firm(self, record: FirmRecord) -> FirmResult:
        """
        Restart a firm from LinkedIn scraping using persisted page analyses
        and prioritized links. Artefacts already on disk are reused.
        """
        slug = self.storage.get_firm_slug(record.name)
        logger.info(f"RESUMING PIPELINE FOR: {record.name}")

        if not self.storage.firm_exists(slug):
            message = f"Data directory not found: {self.storage.get_firm_dir(slug)}"
            logger.error(f"Cannot resume {record.name}. {message}")
            return FirmResult(success=False, firm_name=record.name, firm_slug=slug, error=message)

        start = time.monotonic()
        try:
            page_analyses = [PageAnalysis.model_validate(a) for a in self.storage.load_page_analyses(slug)]
            logger.info(f"Loaded {len(page_analyses)} page analyses")
            high_value = [
                PrioritizedLink.model_validate(link) for link in self.storage.load_json(slug, PRIORITIZED_FILE) or []
            ]
            logger.info(f"Loaded {len(high_value)} prioritized LinkedIn links")

            discovery_data = self.storage.load_json(slug, "discovery.json")
            news_data = self.storage.load_json(slug, "news.json")

            report, stats = await self._complete(
                record,
                slug,
                page_analyses,
                high_value,
                discovery=DiscoveryResult.model_validate(discovery_data) if discovery_data else None,
                news=NewsInsights.model_validate(news_data) if news_data else None,
                reuse_existing=True,
            )
        except Exception as e:
            logger.error(f"Resume failed for {record.name}: {str(e)}", exc_info=True)
            return FirmResult(success=False, firm_name=record.name, firm_slug=slug, error=str(e))

        stats["duration_minutes"] = round((time.monotonic() - start) / 60, 2)
        logger.info(f"RESUME COMPLETE for {record.name}")
        return FirmResult(success=True, firm_name=record.name, firm_slug=slug, report=report, stats=stats)

    async def process_batch(self, records: List[FirmRecord]) -> List[FirmResult]:
        """Process firms sequentially; one firm's failure does not stop the batch"""
        logger.info(f"Starting batch processing for {len(records)} firms")
        results: List[FirmResult] = []
        try:
            for i, record in enumerate(records):
                logger.info(f"[{i + 1}/{len(records)}] {record.name}")
                results.append(await self.process_firm(record))
                if i < len(records) - 1:
                    await asyncio.sleep(self.firm_delay)
        finally:
            await self.close()

        succeeded = sum(1 for r in results if r.success)
        logger.info(f"BATCH COMPLETE: {succeeded} successful, {len(results) - succeeded} failed")
        self.storage.save_batch_results([r.model_dump() for r in results])
        return results

    async def close(self) -> None:
        await self.browser.close()

    async def _homepage_fallback(self, record: FirmRecord) -> List[Dict[str, Any]]:
        """Web search for the firm's site when discovery found no regular pages"""
        if not self.search.is_configured:
            return []
        logger.info(f"No website pages discovered for {record.name}, searching for a homepage")
        result = await self.search.find_homepage(record.name, record.registration_no, record.email)
        if not result:
            return []
        return [{
            "url": result["link"],
            "context": result.get("title") or "Homepage",
            "importance": 90,
            "source": "search",
        }]

    async def _scrape_pages(self, slug: str, regular: List[Dict[str, Any]]) -> List[PageAnalysis]:
        analyses: List[PageAnalysis] = []
        try:
            for i, item in enumerate(regular):
                url = item["url"]
                page_id = f"page_{i + 1:03d}"
                logger.info(f"[{i + 1}/{len(regular)}] {url}")

                scraped = await self.browser.scrape(url)
                if not scraped.ok:
                    logger.warning(f"Skipped {url} ({scraped.error or f'HTTP {scraped.status_code}'})")
                    continue

                cleaned = self.cleaner.clean(scraped.html, url)
                self.storage.save_page(slug, page_id, scraped.html, cleaned.model_dump())

                page_type = detect_page_type(url, cleaned.plain_text)
                analysis = await self.page_analyzer.analyze(cleaned.plain_text, url, page_type)
                self.storage.save_page_analysis(slug, page_id, analysis.model_dump())
                analyses.append(analysis)

                await asyncio.sleep(self.page_delay)
        finally:
            await self.browser.close()

        logger.info(f"Scraped and analyzed {len(analyses)} pages")
        return analyses

    async def _complete(
        self,
        record: FirmRecord,
        slug: str,
        page_analyses: List[PageAnalysis],
        high_value: List[PrioritizedLink],
        discovery: Optional[DiscoveryResult],
        news: Optional[NewsInsights],
        reuse_existing: bool,
    ) -> Tuple[FirmReport, Dict[str, Any]]:
        """LinkedIn scraping, GP enrichment and synthesis, shared by run and resume"""
        logger.info("PHASE 6: Scraping LinkedIn profiles and companies")
        profiles, companies = await self._scrape_linkedin(slug, high_value, reuse_existing)

        logger.info("PHASE 7: GP discovery and enrichment")
        gp_profiles = await self._enrich_gps(slug, record, page_analyses, profiles, reuse_existing)

        logger.info("PHASE 8: Synthesizing final report")
        knowledge_base = KnowledgeBase(
            target_record=record,
            discovery=discovery or DiscoveryResult(),
            news=news,
            page_analyses=page_analyses,
            linkedin_profiles=profiles,
            linkedin_companies=companies,
            gp_profiles=gp_profiles,
        )
        report = await self.synthesizer.execute(knowledge_base)
        self.storage.save_json(slug, REPORT_FILE, report.model_dump())

        if self.enhance_gp_backgrounds and gp_profiles:
            report = await self.gp_enhancer.execute(report, gp_profiles, record)
            self.storage.save_json(slug, REPORT_FILE, report.model_dump())

        logger.info(f"Final report saved to {self.storage.get_firm_dir(slug)}/{REPORT_FILE}")
        stats = {
            "page_analyses": len(page_analyses),
            "prioritized_linkedin": len(high_value),
            "linkedin_profiles": len(profiles),
            "linkedin_companies": len(companies),
            "gp_profiles": len(gp_profiles),
        }
        return report, stats

    async def _scrape_linkedin(
        self,
        slug: str,
        high_value: List[PrioritizedLink],
        reuse_existing: bool,
    ) -> Tuple[List[LinkedInProfile], List[LinkedInCompany]]:
        profiles: List[LinkedInProfile] = []
        companies: List[LinkedInCompany] = []
        if reuse_existing:
            profiles = [LinkedInProfile.model_validate(p) for p in self.storage.load_json(slug, PROFILES_FILE) or []]
            companies = [LinkedInCompany.model_validate(c) for c in self.storage.load_json(slug, COMPANIES_FILE) or []]
            if profiles or companies:
                logger.info(f"Found {len(profiles)} existing profiles and {len(companies)} company pages")

        if not high_value:
            logger.warning("No high-value LinkedIn links to scrape")
            return profiles, companies
        if not self.linkedin.is_configured():
            logger.warning(f"Skipping LinkedIn scraping ({self.linkedin.provider} is not configured)")
            return profiles, companies

        profile_urls, company_urls = split_linkedin_urls([link.url for link in high_value])
        logger.info(f"Profiles to scrape: {len(profile_urls)}, companies to scrape: {len(company_urls)}")

        jobs = {}
        if not profiles and profile_urls:
            jobs["profiles"] = self.linkedin.scrape_profiles(profile_urls)
        if not companies and company_urls:
            jobs["companies"] = self.linkedin.scrape_companies(company_urls)
        if not jobs:
            return profiles, companies

        outcomes = dict(zip(jobs.keys(), await asyncio.gather(*jobs.values())))

        if "profiles" in outcomes:
            outcome = outcomes["profiles"]
            if outcome.success:
                profiles = self.linkedin.format_profiles(outcome.items)
                self.storage.save_json(slug, PROFILES_FILE, [p.model_dump() for p in profiles])
                logger.info(f"Scraped {len(profiles)} LinkedIn profiles")
            else:
                logger.warning(f"LinkedIn profile scraping failed: {outcome.message}")

        if "companies" in outcomes:
            outcome = outcomes["companies"]
            if outcome.success:
                companies = self.linkedin.format_companies(outcome.items)
                self.storage.save_json(slug, COMPANIES_FILE, [c.model_dump() for c in companies])
                logger.info(f"Scraped {len(companies)} LinkedIn company pages")
            else:
                logger.warning(f"LinkedIn company scraping failed: {outcome.message}")

        return profiles, companies

    async def _enrich_gps(
        self,
        slug: str,
        record: FirmRecord,
        page_analyses: List[PageAnalysis],
        profiles: List[LinkedInProfile],
        reuse_existing: bool,
    ) -> List[LinkedInProfile]:
        if reuse_existing:
            existing = self.storage.load_json(slug, GP_PROFILES_FILE)
            if existing:
                logger.info(f"Found {len(existing)} existing GP profiles")
                return [LinkedInProfile.model_validate(p) for p in existing]

        discovered = self.gp_discovery.discover(page_analyses, profiles, record)
        gp_names = filter_gp_names(discovered)
        logger.info(f"Discovered {len(discovered)} potential GPs, {len(gp_names)} valid names")

        if not gp_names:
            return []
        if not self.linkedin.is_configured():
            logger.warning("Skipping GP enrichment (LinkedIn provider not configured)")
            return []

        known = {p.name.lower() for p in profiles if p.name}
        targets = [name for name in gp_names if name.lower() not in known]
        if not targets:
            logger.info("All discovered GPs already have profiles")
            return []

        logger.info(f"Searching for {len(targets)} new GPs")
        gp_profiles = await self.gp_enrichment.execute(targets, record.name)
        if gp_profiles:
            self.storage.save_json(slug, GP_PROFILES_FILE, [p.model_dump() for p in gp_profiles])
            logger.info(f"Enriched {len(gp_profiles)} GP profiles")
        return gp_profiles

    @staticmethod
    def _firm_info(record: FirmRecord) -> Dict[str, Any]:
        return {
            "contact_person": record.contact_person,
            "registration_no": record.registration_no,
            "email": record.email,
            "address": record.address,
            "validity": record.validity,
        }
