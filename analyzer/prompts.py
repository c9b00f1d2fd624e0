"""
CRO Analysis Prompts for Claude API

Builds the audit prompt for the optional model-backed analysis. The model
receives the extracted page facts and the above-the-fold screenshot and must
answer with the same report shape the rule engine produces.
"""

from analyzer.knowledge import ANALYSIS_CATEGORIES, CRO_PRINCIPLES
from analyzer.models import PageType
from analyzer.signals import ScrapedSignals


def get_cro_prompt(signals: ScrapedSignals, page_type: PageType) -> str:
    """
    Generate the CRO audit prompt for one scraped page.

    Args:
        signals: Structured extraction of the rendered page.
        page_type: Page type assigned by the rule-based classifier. The model
                   may override it, but only with one of the known values.

    Returns:
        Complete prompt string for Claude.
    """

    base_prompt = """You are an Expert Conversion Rate Optimization (CRO) Specialist with deep expertise in user experience, behavioral psychology, and e-commerce analytics. You audit a single web page and report concrete, evidence-based findings.

## How to work

- Base every finding on the page facts below or on what is visible in the screenshot.
- Quote the page's own text where it helps (headlines, CTA labels, guarantee copy).
- Do NOT claim an element is missing when the page facts list it.
- Each finding has a type: "success" (done well), "warning" (works but could be better) or "error" (hurts conversion).
- Success findings have an empty "recommendation". Warnings and errors MUST have a specific, actionable recommendation.
- Tag each finding with the CRO principle it relates to.

"""

    return "\n".join([
        base_prompt,
        _format_categories(),
        _format_principles(),
        _format_page_facts(signals, page_type),
        _format_output_schema(),
    ])


def _format_categories() -> str:
    lines = ["## Audit categories", "", "Score every one of these categories from 0 to 100, in this order:", ""]
    for cat in ANALYSIS_CATEGORIES:
        lines.append(f"- `{cat['key']}`: {cat['name']} {cat['icon']}")
    lines.append("")
    return "\n".join(lines)


def _format_principles() -> str:
    lines = ["## CRO principles", ""]
    lines.extend(f"- **{name}**: {text}" for name, text in CRO_PRINCIPLES.items())
    lines.append("")
    return "\n".join(lines)


def _format_page_facts(signals: ScrapedSignals, page_type: PageType) -> str:
    s = signals.structure
    lines = [
        "## Page facts (extracted from the rendered page)",
        "",
        f"- URL: {signals.url}",
        f"- Detected page type: {page_type.value}",
        f"- Viewport: {signals.viewport}",
        f"- Title: {signals.title or '(none)'}",
        f"- Meta description: {signals.meta_description or '(none)'}",
        f"- Load time: {signals.performance.load_time_ms:.0f} ms",
        "",
        "### Headings",
    ]
    if signals.headings:
        for h in signals.headings[:15]:
            fold = " (above fold)" if h.is_above_fold else ""
            lines.append(f"- {h.tag.upper()}: {h.text}{fold}")
    else:
        lines.append("- (none)")

    lines.extend(["", "### Calls to action"])
    if signals.ctas:
        for cta in signals.ctas[:15]:
            markers = [m for m, on in (("primary", cta.is_primary), ("above fold", cta.is_above_fold)) if on]
            suffix = f" ({', '.join(markers)})" if markers else ""
            lines.append(f'- "{cta.text}"{suffix}')
    else:
        lines.append("- (none)")

    lines.extend(["", "### Forms"])
    if signals.forms:
        for i, form in enumerate(signals.forms, 1):
            lines.append(
                f"- Form {i}: {form.field_count} fields, labels {'yes' if form.has_labels else 'no'}, "
                f"validation {'yes' if form.has_validation else 'no'}"
            )
    else:
        lines.append("- (none)")

    lines.extend(["", "### Trust signals"])
    if signals.trust_signals:
        lines.extend(f"- [{t.kind}] {t.description}" for t in signals.trust_signals[:15])
    else:
        lines.append("- (none)")

    copy = signals.copy_analysis
    lines.extend([
        "",
        "### Copy",
        f"- USPs: {_join(copy.usps)}",
        f"- Benefit statements: {_join(copy.benefit_statements)}",
        f"- Feature statements: {_join(copy.feature_statements)}",
        f"- Urgency: {_join(copy.urgency_elements)}",
        f"- Guarantees: {_join(copy.guarantee_statements)}",
        "",
        "### Structure",
    ])
    flags = [name[4:].replace("_", " ") for name, value in s.model_dump().items() if name.startswith("has_") and value]
    lines.append(f"- Present: {', '.join(flags) if flags else '(nothing detected)'}")
    lines.append(f"- Sections: {s.section_count}, navigation items: {s.nav_item_count}")

    with_alt = sum(1 for img in signals.images if img.has_alt)
    lines.append(f"- Images: {len(signals.images)} ({with_alt} with alt text)")
    lines.append(f"- Search: {'yes' if signals.ux.has_search else 'no'}, chat widget: {'yes' if signals.ux.has_chat_widget else 'no'}")
    lines.append("")
    return "\n".join(lines)


def _join(items) -> str:
    return "; ".join(f'"{i}"' for i in items[:5]) if items else "(none)"


def _format_output_schema() -> str:
    page_types = ", ".join(f'"{p.value}"' for p in PageType)
    return f"""## Output format

Respond with ONLY a JSON object, no markdown and no commentary:

{{
  "overall_score": 0-100,
  "page_type": one of {page_types},
  "summary": "2-3 sentence executive summary",
  "categories": [
    {{
      "key": "category key from the list above",
      "name": "category name",
      "icon": "category icon",
      "score": 0-100,
      "findings": [
        {{
          "type": "success" | "warning" | "error",
          "title": "short title",
          "description": "what you observed",
          "recommendation": "what to change (empty for success)",
          "impact": "high" | "medium" | "low",
          "principle": "CRO principle"
        }}
      ]
    }}
  ],
  "quick_wins": [{{"title": "...", "description": "...", "estimated_impact": "..."}}],
  "prioritized_actions": ["up to 5 short action statements"],
  "ab_test_ideas": [
    {{
      "id": 1,
      "title": "...",
      "hypothesis": "...",
      "variant_a": "current version",
      "variant_b": "proposed version",
      "metric": "primary metric",
      "expected_impact": "high" | "medium" | "low",
      "category": "category key",
      "page_types": ["{PageType.HOME.value}"]
    }}
  ],
  "benchmark": {{
    "overall_position": "...",
    "comparisons": [
      {{"metric": "...", "your_value": 0, "industry_avg": 0, "top_performers": 0, "status": "above" | "at" | "below", "recommendation": "..."}}
    ],
    "industry_context": "..."
  }}
}}
"""
