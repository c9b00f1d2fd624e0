"""
Page extraction for CRO Auditor

Renders a URL in a pooled Playwright browser, measures it with a single
DOM-evaluation script and converts the raw measurements into a
ScrapedSignals record. The conversion step (build_signals) is pure so it can
be tested without a browser.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from playwright.async_api import async_playwright, TimeoutError as PlaywrightTimeoutError

from analyzer.signals import (
    CTA,
    FormInfo,
    Heading,
    ImageInfo,
    LinkInfo,
    PageSignals,
    PerformanceTiming,
    ScrapedSignals,
    SecuritySignals,
    StructuralFlags,
    TrustSignal,
    UXSignals,
    CopyAnalysis,
    MAX_CTAS,
    MAX_HEADINGS,
    MAX_IMAGES,
    MAX_LINKS,
)
from analyzer.text_index import tag_fragments
from config import settings
from core.browser import VIEWPORT_PROFILES, get_browser_pool
from utils.images.processor import resize_screenshot_if_needed

logger = logging.getLogger(__name__)

POOL_ACQUIRE_TIMEOUT = 15
MAX_TRUST_PER_KIND = 10

# Runs inside the page; returns plain JSON-serializable measurements.
EXTRACT_SCRIPT = r"""
() => {
  const text = (el) => (el && el.textContent ? el.textContent.replace(/\s+/g, ' ').trim() : '');
  const rect = (el) => el.getBoundingClientRect();
  const absTop = (el) => rect(el).top + window.scrollY;
  const visible = (el) => {
    const r = rect(el);
    const s = window.getComputedStyle(el);
    return r.width > 0 && r.height > 0 && s.visibility !== 'hidden' && s.display !== 'none';
  };
  const any = (selector) => !!document.querySelector(selector);
  const host = window.location.hostname;

  const metaTags = {};
  document.querySelectorAll('meta').forEach((m) => {
    const name = m.getAttribute('name') || m.getAttribute('property') || '';
    const content = m.getAttribute('content') || '';
    if (name && content) metaTags[name.toLowerCase()] = content.slice(0, 300);
  });

  const headings = Array.from(document.querySelectorAll('h1, h2, h3, h4, h5, h6'))
    .filter(visible)
    .slice(0, 80)
    .map((h) => ({ tag: h.tagName.toLowerCase(), text: text(h).slice(0, 200), top: absTop(h) }));

  const ctaSelector = 'button, a.btn, a.button, [role="button"], [class*="cta"], [class*="btn"], input[type="submit"]';
  const seen = new Set();
  const ctas = [];
  for (const el of document.querySelectorAll(ctaSelector)) {
    if (ctas.length >= 40 || seen.has(el) || !visible(el)) continue;
    seen.add(el);
    const label = (text(el) || el.value || el.getAttribute('aria-label') || '').slice(0, 100);
    if (!label) continue;
    const r = rect(el);
    ctas.push({
      text: label,
      tag: el.tagName.toLowerCase(),
      href: el.href || null,
      top: r.top + window.scrollY,
      width: r.width,
      height: r.height,
      font_size: parseFloat(window.getComputedStyle(el).fontSize) || 0,
    });
  }

  const forms = Array.from(document.querySelectorAll('form')).slice(0, 10).map((form) => {
    const fields = Array.from(form.querySelectorAll('input, select, textarea'))
      .filter((f) => !['hidden', 'submit', 'button'].includes((f.type || '').toLowerCase()));
    return {
      field_count: fields.length,
      has_labels: form.querySelectorAll('label').length > 0,
      has_validation: fields.some((f) => f.required || f.pattern || f.getAttribute('aria-invalid') !== null),
      field_types: fields.map((f) => (f.type || f.tagName).toLowerCase()).slice(0, 20),
    };
  });

  const images = Array.from(document.querySelectorAll('img')).slice(0, 60).map((img) => ({
    src: (img.currentSrc || img.src || '').slice(0, 300),
    alt: (img.alt || '').slice(0, 200),
  }));

  const links = Array.from(document.querySelectorAll('a[href]')).slice(0, 150).map((a) => ({
    text: text(a).slice(0, 100),
    href: a.href,
    is_external: !!a.hostname && a.hostname !== host,
  }));

  const nav = document.querySelector('header nav, nav, [role="navigation"]');
  let navItemCount = 0;
  if (nav) {
    const topLevel = nav.querySelectorAll(':scope > ul > li, :scope > div > ul > li, :scope > a');
    const items = topLevel.length ? Array.from(topLevel) : Array.from(nav.querySelectorAll('a'));
    navItemCount = items.filter(visible).filter((el) => {
      const cls = (el.className || '').toString().toLowerCase();
      return !/(login|account|cart|basket|kurv|search|lang|currency|wishlist)/.test(cls);
    }).length;
  }

  const productTiles = new Set(document.querySelectorAll(
    '[class*="product-card"], [class*="product-item"], [class*="productcard"], li.product, [data-product-id]'
  ));
  const jsonLd = Array.from(document.querySelectorAll('script[type="application/ld+json"]'))
    .map((s) => s.textContent || '').join(' ');
  const bodyText = document.body ? document.body.innerText || '' : '';

  const checkoutSelectors = [
    'input[autocomplete="cc-number"]', 'input[name*="card" i]', '[class*="checkout" i]',
    '[id*="checkout" i]', 'input[autocomplete="shipping street-address"]', '[class*="payment-method" i]',
  ];

  const externalScripts = Array.from(document.querySelectorAll('script[src]'))
    .filter((s) => { try { return new URL(s.src).hostname !== host; } catch (e) { return false; } });
  const emailMatches = bodyText.match(/[\w.+-]+@[\w-]+\.[\w.]+/g) || [];
  const mailtos = Array.from(document.querySelectorAll('a[href^="mailto:"]'))
    .map((a) => a.href.replace('mailto:', '').split('?')[0]);

  const cookieSelector = '#CybotCookiebotDialog, #onetrust-banner-sdk, .cc-window, #cookie-consent, ' +
    '[id*="cookie" i][class*="banner" i], [class*="cookie-consent" i], [class*="cookiebanner" i], [aria-label*="cookie" i]';
  const popup = Array.from(document.querySelectorAll('[role="dialog"], [class*="modal" i], [class*="popup" i]'))
    .filter(visible)
    .some((el) => {
      const r = rect(el);
      const s = window.getComputedStyle(el);
      const covers = (r.width * r.height) / (window.innerWidth * window.innerHeight) > 0.4;
      return covers && (s.position === 'fixed' || s.position === 'absolute') && !el.matches(cookieSelector);
    });
  const header = document.querySelector('header');
  const headerPosition = header ? window.getComputedStyle(header).position : '';

  const badgeNodes = Array.from(document.querySelectorAll(
    '[class*="trust" i], [class*="badge" i], [class*="secure" i], [class*="guarantee" i], ' +
    'img[alt*="trustpilot" i], img[alt*="e-mærket" i], img[src*="emaerket" i], img[alt*="ssl" i], img[alt*="secure" i]'
  )).filter(visible).slice(0, 15);
  const badges = badgeNodes.map((el) => (el.alt || text(el) || el.className.toString()).slice(0, 120));

  const nav_perf = performance.getEntriesByType('navigation')[0];

  return {
    title: document.title || '',
    meta_tags: metaTags,
    headings,
    ctas,
    forms,
    images,
    links,
    viewport_height: window.innerHeight,
    structure: {
      has_nav: !!nav,
      has_footer: any('footer'),
      has_hero: any('[class*="hero" i], [class*="banner" i], [class*="jumbotron" i]'),
      has_faq: any('[class*="faq" i], [id*="faq" i], [class*="accordion" i]'),
      has_testimonials: any('[class*="testimonial" i], [class*="review" i], [class*="trustpilot" i]'),
      has_pricing: any('[class*="pricing" i], [class*="price" i], [itemprop="price"]'),
      has_video: any('video, iframe[src*="youtube"], iframe[src*="vimeo"]'),
      has_trust_badges: badgeNodes.length > 0,
      has_newsletter: any('[class*="newsletter" i], [class*="subscribe" i], [class*="signup" i], input[name*="newsletter" i]'),
      has_product_gallery: any('[class*="gallery" i], [class*="product-image" i], [class*="carousel" i] img, [class*="thumbnails" i]'),
      has_add_to_cart: any('[name="add"], [class*="add-to-cart" i], [class*="addtocart" i], [data-action*="add-to-cart" i]') ||
        /(add to cart|læg i kurv|tilføj til kurv|add to bag)/i.test(ctas.map((c) => c.text).join(' | ')),
      has_checkout_form: any('form[action*="checkout" i], input[autocomplete="cc-number"]'),
      has_filters: any('[class*="filter" i], [class*="facet" i]'),
      has_breadcrumbs: any('[class*="breadcrumb" i], nav[aria-label*="breadcrumb" i], [itemtype*="BreadcrumbList"]'),
      has_progress_indicator: any('[class*="progress" i], [class*="step" i][class*="checkout" i], ol[class*="steps" i]'),
      section_count: document.querySelectorAll('section, main > div, [class*="section" i]').length,
      nav_item_count: navItemCount,
    },
    page: {
      has_product_schema: /"@type"\s*:\s*"Product"/.test(jsonLd) || any('[itemtype*="schema.org/Product"]'),
      price_visible: any('[itemprop="price"], [class*="price" i]') ||
        /(\d[\d.,]*\s?(kr\.?|dkk|,-)|(\$|€|£)\s?\d)/i.test(bodyText.slice(0, 5000)),
      product_count: productTiles.size,
      checkout_indicator_count: checkoutSelectors.filter((s) => any(s)).length,
    },
    security: {
      is_https: window.location.protocol === 'https:',
      has_privacy_policy_link: Array.from(document.querySelectorAll('a')).some((a) =>
        /(privacy|privatliv|persondata|gdpr)/i.test(a.href + ' ' + text(a))),
      has_cookie_consent: any(cookieSelector),
      exposed_emails: Array.from(new Set(emailMatches.concat(mailtos))).slice(0, 20),
      third_party_script_count: externalScripts.length,
      scripts_without_sri: externalScripts.filter((s) => !s.integrity).length,
      jquery_version: window.jQuery && window.jQuery.fn ? window.jQuery.fn.jquery : null,
      has_admin_login_link: any('a[href*="/wp-admin"], a[href*="/wp-login"], a[href*="/admin"], a[href*="/administrator"]'),
      has_aggressive_popup: popup,
      has_checkout_security_badge: badges.some((b) => /(secure|ssl|sikker|norton|mcafee|e-mærket|emaerket|verified)/i.test(b)),
      has_password_field: any('input[type="password"]'),
    },
    ux: {
      has_search: any('input[type="search"], form[role="search"], input[name="q"], input[name="s"], [class*="search" i] input'),
      has_chat_widget: any('#intercom-container, .intercom-launcher, #zendesk, iframe[title*="chat" i], #tidio-chat, .crisp-client, #drift-widget, [class*="livechat" i], [id*="chat-widget" i]'),
      has_cookie_consent: any(cookieSelector),
      has_sticky_header: headerPosition === 'fixed' || headerPosition === 'sticky',
    },
    trust_badges: badges,
    text: bodyText.slice(0, 8000),
    dom_content_loaded: nav_perf ? Math.round(nav_perf.domContentLoadedEventEnd) : 0,
    resource_count: performance.getEntriesByType('resource').length,
  };
}
"""


@dataclass
class ScrapeResult:
    signals: ScrapedSignals
    screenshot: Optional[str] = None  # base64 JPEG of the first viewport


# ======================
# Pure conversion
# ======================

def is_primary_cta(font_size_px: float, area_px2: float) -> bool:
    return (
        area_px2 >= settings.CTA_PRIMARY_MIN_AREA_PX2
        and font_size_px >= settings.CTA_PRIMARY_MIN_FONT_PX
    )


def _build_ctas(raw_ctas: List[Dict[str, Any]], fold: float) -> List[CTA]:
    ctas = []
    for raw in raw_ctas[:MAX_CTAS]:
        area = float(raw.get("width", 0)) * float(raw.get("height", 0))
        font = float(raw.get("font_size", 0))
        ctas.append(
            CTA(
                text=raw.get("text", ""),
                tag=raw.get("tag", "button"),
                href=raw.get("href"),
                is_above_fold=float(raw.get("top", fold)) < fold,
                font_size_px=font,
                area_px2=round(area, 1),
                is_primary=is_primary_cta(font, area),
            )
        )
    return ctas


def _build_trust_signals(badges: List[str], fragments: Dict[str, List[str]]) -> List[TrustSignal]:
    signals = [TrustSignal(kind="badge", description=b) for b in badges[:MAX_TRUST_PER_KIND] if b]
    for tag, kind in (("trust_text", "text"), ("social_proof", "social_proof"), ("authority", "authority")):
        signals.extend(
            TrustSignal(kind=kind, description=fragment)
            for fragment in fragments.get(tag, [])[:MAX_TRUST_PER_KIND]
        )
    return signals


def build_signals(
    raw: Dict[str, Any],
    url: str,
    viewport: str = "desktop",
    load_time_ms: float = 0,
) -> ScrapedSignals:
    """Convert raw DOM measurements into a bounded ScrapedSignals record."""
    fold = float(raw.get("viewport_height") or VIEWPORT_PROFILES[viewport]["viewport"]["height"])
    meta_tags = {k: v for k, v in (raw.get("meta_tags") or {}).items() if v}
    text = raw.get("text", "") or ""

    headings = [
        Heading(tag=h.get("tag", "h2"), text=h.get("text", ""), is_above_fold=float(h.get("top", fold)) < fold)
        for h in (raw.get("headings") or [])[:MAX_HEADINGS]
    ]

    # Headings are part of the readable copy even when body text is truncated
    copy_source = "\n".join([meta_tags.get("description", "")] + [h.text for h in headings] + [text])
    fragments = tag_fragments(copy_source)

    return ScrapedSignals(
        url=url,
        title=raw.get("title", ""),
        meta_description=meta_tags.get("description") or meta_tags.get("og:description", ""),
        viewport=viewport,
        headings=headings,
        ctas=_build_ctas(raw.get("ctas") or [], fold),
        forms=[FormInfo(**f) for f in raw.get("forms") or []],
        trust_signals=_build_trust_signals(raw.get("trust_badges") or [], fragments),
        copy_analysis=CopyAnalysis(
            usps=fragments["usp"],
            benefit_statements=fragments["benefit"],
            feature_statements=fragments["feature"],
            urgency_elements=fragments["urgency"],
            guarantee_statements=fragments["guarantee"],
        ),
        structure=StructuralFlags(**(raw.get("structure") or {})),
        page=PageSignals(**(raw.get("page") or {})),
        images=[
            ImageInfo(src=i.get("src", ""), alt=i.get("alt", ""), has_alt=bool(i.get("alt", "").strip()))
            for i in (raw.get("images") or [])[:MAX_IMAGES]
        ],
        links=[LinkInfo(**link) for link in (raw.get("links") or [])[:MAX_LINKS]],
        meta_tags=meta_tags,
        performance=PerformanceTiming(
            load_time_ms=round(load_time_ms),
            dom_content_loaded_ms=raw.get("dom_content_loaded", 0),
            resource_count=raw.get("resource_count", 0),
        ),
        security=SecuritySignals(**raw["security"]) if raw.get("security") else None,
        ux=UXSignals(**(raw.get("ux") or {})),
        text_content=text,
    )


# ======================
# Browser side
# ======================

async def _navigate(page, url: str) -> float:
    """Navigate with a progressive timeout and return the load time in ms."""
    timeouts = [settings.NAVIGATION_TIMEOUT_MS, settings.NAVIGATION_RETRY_TIMEOUT_MS]
    for attempt, timeout_ms in enumerate(timeouts, start=1):
        start = time.time()
        try:
            logger.info(f"🔄 Navigation attempt {attempt} with {timeout_ms/1000}s timeout")
            await page.goto(url, wait_until="load", timeout=timeout_ms)
            load_ms = (time.time() - start) * 1000
            logger.info(f"⏱️  Page navigation completed in {load_ms/1000:.2f}s (attempt {attempt})")
            return load_ms
        except PlaywrightTimeoutError:
            if attempt == len(timeouts):
                raise asyncio.TimeoutError(f"Navigation to {url} timed out after {attempt} attempts")
            logger.warning(f"⚠️  Navigation timeout at {timeout_ms/1000}s, retrying...")
    raise asyncio.TimeoutError(f"Navigation to {url} timed out")


async def _extract(page, url: str, viewport: str) -> ScrapeResult:
    load_ms = await _navigate(page, url)
    await page.wait_for_timeout(settings.SETTLE_DELAY_MS)

    screenshot_bytes = await page.screenshot(full_page=False, type="jpeg", quality=80)
    screenshot = resize_screenshot_if_needed(screenshot_bytes)

    raw = await page.evaluate(EXTRACT_SCRIPT)
    signals = build_signals(raw, url=page.url or url, viewport=viewport, load_time_ms=load_ms)
    logger.info(
        f"📄 Extracted {len(signals.headings)} headings, {len(signals.ctas)} CTAs, "
        f"{len(signals.forms)} forms from {url}"
    )
    return ScrapeResult(signals=signals, screenshot=screenshot)


async def scrape_page(url: str, viewport: str = "desktop") -> ScrapeResult:
    """
    Render a URL and extract its signals.

    Raises:
        asyncio.TimeoutError: If navigation times out on both attempts
        RuntimeError: If no browser can be started
    """
    try:
        pool = await get_browser_pool()
        browser, context, page = await asyncio.wait_for(pool.acquire(viewport), timeout=POOL_ACQUIRE_TIMEOUT)
    except (asyncio.TimeoutError, RuntimeError) as e:
        logger.warning(f"⚠️  Browser pool unavailable ({e}), using standalone browser")
        return await _scrape_standalone(url, viewport)

    try:
        return await _extract(page, url, viewport)
    finally:
        await pool.release(browser, context, page)


async def _scrape_standalone(url: str, viewport: str) -> ScrapeResult:
    try:
        playwright = await async_playwright().start()
    except Exception as e:
        raise RuntimeError(f"Could not start a browser: {e}") from e

    try:
        browser = await playwright.chromium.launch(headless=True)
    except Exception as e:
        await playwright.stop()
        raise RuntimeError(f"Could not start a browser: {e}") from e

    try:
        context = await browser.new_context(**VIEWPORT_PROFILES[viewport])
        page = await context.new_page()
        return await _extract(page, url, viewport)
    finally:
        await browser.close()
        await playwright.stop()
