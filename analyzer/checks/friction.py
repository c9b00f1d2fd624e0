"""
Friction and barrier checks: forms, privacy, contact, distractions and
UX honeycomb basics (search, accessibility, consent, help).
"""

from typing import Optional

from analyzer.knowledge import CATEGORY_META
from analyzer.models import Category, Finding, PageType
from analyzer.rules import CategoryDefinition, Check, CheckContext, error, only, run_category, success, warning
from analyzer.signals import ScrapedSignals, SpeedData

FORM_FIELDS_IDEAL = 3
FORM_FIELDS_MAX = 5
CHECKOUT_EXTERNAL_LINKS_OK = 2
CHECKOUT_EXTERNAL_LINKS_MAX = 5


def _has_forms(ctx: CheckContext) -> bool:
    return bool(ctx.signals.forms)


def check_form_fields(ctx: CheckContext) -> Finding:
    largest = max(f.field_count for f in ctx.signals.forms)

    if largest <= FORM_FIELDS_IDEAL:
        return success(
            "Short forms",
            f"The largest form asks for {largest} field(s).",
            "high",
            "Cognitive Load",
        )

    if largest <= FORM_FIELDS_MAX:
        return warning(
            "Forms could be shorter",
            f"The largest form asks for {largest} fields.",
            "Remove optional fields or ask for them after conversion.",
            "medium",
            "Cognitive Load",
        )

    return error(
        "Long forms",
        f"The largest form asks for {largest} fields; every extra field costs completions.",
        f"Cut the form to {FORM_FIELDS_IDEAL}-{FORM_FIELDS_MAX} essential fields or split it into steps.",
        "high",
        "Cognitive Load",
    )


def check_form_labels(ctx: CheckContext) -> Finding:
    unlabelled = sum(1 for f in ctx.signals.forms if not f.has_labels)
    if unlabelled == 0:
        return success(
            "Form fields are labelled",
            "Every form has visible labels.",
            "medium",
            "Accessibility",
        )
    return warning(
        "Form fields lack labels",
        f"{unlabelled} of {len(ctx.signals.forms)} form(s) rely on placeholders instead of labels.",
        "Add visible labels above fields; placeholders disappear as soon as the user types.",
        "medium",
        "Accessibility",
    )


def check_form_validation(ctx: CheckContext) -> Finding:
    if any(f.has_validation for f in ctx.signals.forms):
        return success(
            "Inline form validation",
            "Forms validate input before submission.",
            "low",
            "Cognitive Load",
        )
    return warning(
        "No inline form validation",
        "Errors are only discovered after submitting the form.",
        "Validate fields inline and show helpful error messages next to the field.",
        "low",
        "Cognitive Load",
    )


def check_privacy(ctx: CheckContext) -> Finding:
    security = ctx.signals.security
    if ctx.text.has("privacy") or (security is not None and security.has_privacy_policy_link):
        return success(
            "Privacy information available",
            "The page references a privacy policy or data protection terms.",
            "medium",
            "Trust",
        )
    return warning(
        "No privacy information",
        "Visitors get no information about how their personal data is handled.",
        "Link to the privacy policy from the footer and next to every form.",
        "medium",
        "Trust",
    )


def check_contact(ctx: CheckContext) -> Finding:
    if ctx.text.has("contact"):
        return success(
            "Contact information visible",
            "Visitors can find a phone number, email address or contact page.",
            "medium",
            "Trust",
        )
    return warning(
        "No contact information",
        "Visitors cannot see how to reach a human if they have questions.",
        "Show phone, email or a contact link in the header or footer.",
        "medium",
        "Trust",
    )


def check_external_links(ctx: CheckContext) -> Finding:
    external = sum(1 for link in ctx.signals.links if link.is_external)

    if external <= CHECKOUT_EXTERNAL_LINKS_OK:
        return success(
            "Distraction-free checkout",
            f"The checkout has {external} external link(s).",
            "medium",
            "Cognitive Load",
        )

    if external <= CHECKOUT_EXTERNAL_LINKS_MAX:
        return warning(
            "External links in checkout",
            f"{external} external links can pull shoppers out of the checkout.",
            "Remove non-essential links from the checkout and keep only policy links.",
            "medium",
            "Cognitive Load",
        )

    return error(
        "Checkout leaks visitors",
        f"{external} external links offer exits from the checkout.",
        "Use an enclosed checkout without navigation, footer links or social icons.",
        "high",
        "Cognitive Load",
    )


def check_search(ctx: CheckContext) -> Finding:
    if ctx.signals.ux.has_search:
        return success(
            "Site search available",
            "Visitors can search for what they came for.",
            "medium",
            "Findability",
        )
    return warning(
        "No site search",
        "Visitors who know what they want cannot search for it.",
        "Add a visible search field in the header with autocomplete.",
        "medium",
        "Findability",
    )


def check_alt_text(ctx: CheckContext) -> Finding:
    missing = sum(1 for i in ctx.signals.images if not i.has_alt)
    if missing == 0:
        return success(
            "Images are accessible",
            "Every image carries alternative text for screen readers.",
            "low",
            "Accessibility",
        )
    return warning(
        "Images missing alt text",
        f"{missing} image(s) cannot be understood by screen reader users.",
        "Add alt text that describes what each meaningful image shows.",
        "low",
        "Accessibility",
    )


def check_cookie_consent(ctx: CheckContext) -> Finding:
    security = ctx.signals.security
    if ctx.signals.ux.has_cookie_consent or (security is not None and security.has_cookie_consent):
        return success(
            "Cookie consent handled",
            "A cookie consent banner asks visitors for permission.",
            "low",
            "Trust",
        )
    return warning(
        "No cookie consent banner",
        "No consent banner was detected, which may breach GDPR and the ePrivacy rules.",
        "Add a compliant consent banner that is easy to accept or decline.",
        "low",
        "Trust",
    )


def check_chat_widget(ctx: CheckContext) -> Finding:
    if ctx.signals.ux.has_chat_widget:
        return success(
            "Live help available",
            "A chat widget lets hesitant visitors ask questions before buying.",
            "low",
            "Trust",
        )
    return warning(
        "No live help",
        "Visitors with a last question have nowhere quick to ask it.",
        "Offer live chat or a chatbot on key purchase pages.",
        "low",
        "Trust",
    )


CATEGORY = CategoryDefinition(
    key="friction",
    name=CATEGORY_META["friction"]["name"],
    icon=CATEGORY_META["friction"]["icon"],
    checks=[
        Check("form_fields", check_form_fields, requires=_has_forms),
        Check("form_labels", check_form_labels, requires=_has_forms),
        Check("form_validation", check_form_validation, requires=_has_forms),
        Check("privacy", check_privacy),
        Check("contact", check_contact),
        Check("external_links", check_external_links, page_types=only(PageType.CHECKOUT)),
        Check("search", check_search, page_types=only(PageType.HOME, PageType.COLLECTION)),
        Check("alt_text", check_alt_text),
        Check("cookie_consent", check_cookie_consent),
        Check(
            "chat_widget",
            check_chat_widget,
            page_types=only(PageType.PRODUCT, PageType.CART, PageType.CHECKOUT, PageType.LANDING),
        ),
    ],
)


def analyze(signals: ScrapedSignals, page_type: PageType, speed: Optional[SpeedData] = None) -> Category:
    return run_category(CATEGORY, CheckContext.build(signals, page_type, speed))
