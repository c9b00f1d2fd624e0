"""
Signal model for CRO Auditor

Typed shape of everything extracted from one rendered page, plus the
optional external records (PageSpeed metrics, security headers) that the
audit consumes. Pure data: no behaviour beyond list bounding.

All lists are truncated on construction so that every downstream check
runs over a bounded amount of data regardless of what the producer sent.
"""

from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


# Upper bounds for extracted collections
MAX_HEADINGS = 60
MAX_CTAS = 30
MAX_FORMS = 10
MAX_TRUST_SIGNALS = 40
MAX_COPY_FRAGMENTS = 20
MAX_IMAGES = 50
MAX_LINKS = 100
MAX_META_TAGS = 60
MAX_TEXT_CHARS = 8000
MAX_AUDIT_ITEMS = 15


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class Heading(_Frozen):
    tag: str
    text: str = ""
    is_above_fold: bool = False


class CTA(_Frozen):
    text: str = ""
    tag: str = "button"
    href: Optional[str] = None
    is_above_fold: bool = False
    font_size_px: float = 0
    area_px2: float = 0
    is_primary: bool = False


class FormInfo(_Frozen):
    field_count: int = 0
    has_labels: bool = False
    has_validation: bool = False
    field_types: List[str] = Field(default_factory=list)


class TrustSignal(_Frozen):
    kind: Literal["badge", "text", "social_proof", "authority"]
    description: str = ""


class CopyAnalysis(_Frozen):
    """Sentence-level text fragments classified by the copy patterns."""

    usps: List[str] = Field(default_factory=list)
    benefit_statements: List[str] = Field(default_factory=list)
    feature_statements: List[str] = Field(default_factory=list)
    urgency_elements: List[str] = Field(default_factory=list)
    guarantee_statements: List[str] = Field(default_factory=list)

    @field_validator(
        "usps",
        "benefit_statements",
        "feature_statements",
        "urgency_elements",
        "guarantee_statements",
    )
    @classmethod
    def _bound(cls, value: List[str]) -> List[str]:
        return value[:MAX_COPY_FRAGMENTS]


class StructuralFlags(_Frozen):
    has_nav: bool = False
    has_footer: bool = False
    has_hero: bool = False
    has_faq: bool = False
    has_testimonials: bool = False
    has_pricing: bool = False
    has_video: bool = False
    has_trust_badges: bool = False
    has_newsletter: bool = False
    has_product_gallery: bool = False
    has_add_to_cart: bool = False
    has_checkout_form: bool = False
    has_filters: bool = False
    has_breadcrumbs: bool = False
    has_progress_indicator: bool = False
    section_count: int = 0
    nav_item_count: int = 0


class PageSignals(_Frozen):
    """Commerce markers used only by the page classifier."""

    has_product_schema: bool = False
    price_visible: bool = False
    product_count: int = 0
    checkout_indicator_count: int = 0


class ImageInfo(_Frozen):
    src: str = ""
    alt: str = ""
    has_alt: bool = False


class LinkInfo(_Frozen):
    text: str = ""
    href: str = ""
    is_external: bool = False


class PerformanceTiming(_Frozen):
    load_time_ms: float = 0
    dom_content_loaded_ms: float = 0
    resource_count: int = 0


class SecuritySignals(_Frozen):
    is_https: bool = False
    has_privacy_policy_link: bool = False
    has_cookie_consent: bool = False
    exposed_emails: List[str] = Field(default_factory=list)
    third_party_script_count: int = 0
    scripts_without_sri: int = 0
    jquery_version: Optional[str] = None
    has_admin_login_link: bool = False
    has_aggressive_popup: bool = False
    has_checkout_security_badge: bool = False
    has_password_field: bool = False

    @field_validator("exposed_emails")
    @classmethod
    def _bound_emails(cls, value: List[str]) -> List[str]:
        return value[:MAX_COPY_FRAGMENTS]


class UXSignals(_Frozen):
    has_search: bool = False
    has_chat_widget: bool = False
    has_cookie_consent: bool = False
    has_sticky_header: bool = False


class ScrapedSignals(_Frozen):
    """Structured extraction of one rendered page."""

    url: str
    title: str = ""
    meta_description: str = ""
    viewport: Literal["desktop", "mobile"] = "desktop"
    headings: List[Heading] = Field(default_factory=list)
    ctas: List[CTA] = Field(default_factory=list)
    forms: List[FormInfo] = Field(default_factory=list)
    trust_signals: List[TrustSignal] = Field(default_factory=list)
    copy_analysis: CopyAnalysis = Field(default_factory=CopyAnalysis)
    structure: StructuralFlags = Field(default_factory=StructuralFlags)
    page: PageSignals = Field(default_factory=PageSignals)
    images: List[ImageInfo] = Field(default_factory=list)
    links: List[LinkInfo] = Field(default_factory=list)
    meta_tags: Dict[str, str] = Field(default_factory=dict)
    performance: PerformanceTiming = Field(default_factory=PerformanceTiming)
    security: Optional[SecuritySignals] = None
    ux: UXSignals = Field(default_factory=UXSignals)
    text_content: str = ""

    @field_validator("headings")
    @classmethod
    def _bound_headings(cls, value):
        return value[:MAX_HEADINGS]

    @field_validator("ctas")
    @classmethod
    def _bound_ctas(cls, value):
        return value[:MAX_CTAS]

    @field_validator("forms")
    @classmethod
    def _bound_forms(cls, value):
        return value[:MAX_FORMS]

    @field_validator("trust_signals")
    @classmethod
    def _bound_trust(cls, value):
        return value[:MAX_TRUST_SIGNALS]

    @field_validator("images")
    @classmethod
    def _bound_images(cls, value):
        return value[:MAX_IMAGES]

    @field_validator("links")
    @classmethod
    def _bound_links(cls, value):
        return value[:MAX_LINKS]

    @field_validator("meta_tags")
    @classmethod
    def _bound_meta(cls, value: Dict[str, str]) -> Dict[str, str]:
        return dict(list(value.items())[:MAX_META_TAGS])

    @field_validator("text_content")
    @classmethod
    def _bound_text(cls, value: str) -> str:
        return value[:MAX_TEXT_CHARS]


# ======================
# External data records
# ======================

class SpeedAudit(_Frozen):
    title: str
    display_value: Optional[str] = None
    description: str = ""


class SpeedData(_Frozen):
    """Lighthouse-style metrics for one strategy (desktop or mobile)."""

    strategy: Literal["desktop", "mobile"] = "mobile"
    performance_score: Optional[int] = None
    accessibility_score: Optional[int] = None
    best_practices_score: Optional[int] = None
    seo_score: Optional[int] = None
    lcp: Optional[float] = None
    fcp: Optional[float] = None
    tbt: Optional[float] = None
    cls: Optional[float] = None
    si: Optional[float] = None
    ttfb: Optional[float] = None
    opportunities: List[SpeedAudit] = Field(default_factory=list)
    diagnostics: List[SpeedAudit] = Field(default_factory=list)
    issues: List[SpeedAudit] = Field(default_factory=list)

    @field_validator("opportunities", "diagnostics", "issues")
    @classmethod
    def _bound_audits(cls, value):
        return value[:MAX_AUDIT_ITEMS]


class SecurityHeadersData(_Frozen):
    """Response headers of the audited URL; a value of None means absent."""

    final_url: str = ""
    status_code: int = 0
    hsts: Optional[str] = None
    csp: Optional[str] = None
    x_frame_options: Optional[str] = None
    x_content_type_options: Optional[str] = None
    referrer_policy: Optional[str] = None
    permissions_policy: Optional[str] = None
    server: Optional[str] = None
    x_powered_by: Optional[str] = None
    robots_txt: Optional[str] = None
