"""
CRO knowledge base: audit categories and the principle taxonomy that
findings are tagged with.
"""

from typing import Dict, List


# Category metadata in report order
ANALYSIS_CATEGORIES: List[Dict[str, str]] = [
    {"key": "above-the-fold", "name": "Above the Fold", "icon": "👁️"},
    {"key": "cta", "name": "Call to Action", "icon": "🎯"},
    {"key": "social-proof", "name": "Social Proof & Trust", "icon": "⭐"},
    {"key": "content", "name": "Content & Copywriting", "icon": "✍️"},
    {"key": "navigation", "name": "Navigation & Structure", "icon": "🧭"},
    {"key": "design", "name": "Visual Design & UX", "icon": "🎨"},
    {"key": "mobile", "name": "Mobile & Performance", "icon": "📱"},
    {"key": "conversion", "name": "Conversion Elements", "icon": "💰"},
    {"key": "friction", "name": "Friction & Barriers", "icon": "🚧"},
]

CATEGORY_META: Dict[str, Dict[str, str]] = {c["key"]: c for c in ANALYSIS_CATEGORIES}


# CRO principles referenced by findings
CRO_PRINCIPLES: Dict[str, str] = {
    "Clarity": "Visitors decide within seconds whether a page is relevant; the offer must be obvious.",
    "Value Proposition": "State what the visitor gets and why it beats the alternatives.",
    "Visual Hierarchy": "Size, contrast and position guide attention to what matters most.",
    "Fitts's Law": "Large, nearby targets are faster and easier to hit.",
    "Von Restorff Effect": "The element that stands out is the one that is remembered and clicked.",
    "Hick's Law": "Decision time grows with the number of choices presented.",
    "Social Proof": "People follow the behaviour of others when they are uncertain.",
    "Authority": "Endorsements from recognised experts and media raise credibility.",
    "Trust": "Security cues and transparent policies lower perceived risk.",
    "Cognitive Load": "Every extra element or field costs attention and increases drop-off.",
    "Benefit Framing": "Outcomes persuade more than specifications.",
    "Jakob's Law": "Users expect a site to work like the sites they already know.",
    "Doherty Threshold": "Productivity and engagement fall when responses take longer than ~400ms.",
    "Scarcity": "Limited availability or time increases perceived value.",
    "Loss Aversion": "Avoiding a loss motivates more than an equivalent gain.",
    "Risk Reversal": "Guarantees shift risk from buyer to seller and unlock hesitant buyers.",
    "Reciprocity": "Giving something of value first earns attention and contact details.",
    "Goal-Gradient Effect": "Visible progress toward a goal increases completion.",
    "Accessibility": "Content that everyone can perceive and operate converts a wider audience.",
    "Findability": "Visitors who cannot find a product cannot buy it.",
    "Mobile First": "Most traffic is mobile; the small screen sets the bar.",
}
