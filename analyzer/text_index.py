"""
Tagged-fragment index over page copy.

The page text is split into sentences once and every sentence is matched
against an ordered list of (tag, pattern) pairs. Analyzers query the
resulting index instead of re-scanning raw text. The same patterns are used
by the extractor to build CopyAnalysis and text-based trust signals.

Patterns cover English and Danish storefront copy.
"""

import re
from typing import Dict, List, Tuple

from analyzer.signals import ScrapedSignals


MAX_FRAGMENT_CHARS = 200
MAX_FRAGMENTS_PER_TAG = 20

TEXT_PATTERNS: List[Tuple[str, re.Pattern]] = [
    (
        "benefit",
        re.compile(
            r"\b(spar|save|saving|gratis|free|fri fragt|hurtig\w*|fast(er)?|easy|easier|nem\w*|"
            r"enkel\w*|simple|bedre|better|best|bedste|boost|increase|øg|get more|få mere|"
            r"du får|you get|undgå|avoid|without|uden besvær|in minutes|på minutter|"
            r"guaranteed|garanteret)\b|\d+\s?%",
            re.IGNORECASE,
        ),
    ),
    (
        "feature",
        re.compile(
            r"\b(\d+\s?(gb|tb|mb|mah|w|kg|cm|mm|ml|l)\b|made of|lavet af|materiale|material|"
            r"specifications?|specifikationer|dimensions?|mål|includes|inkluderer|features?|"
            r"funktion\w*|compatible|kompatibel|version)\b",
            re.IGNORECASE,
        ),
    ),
    (
        "usp",
        re.compile(
            r"\b(fri fragt|free shipping|free delivery|gratis levering|levering i morgen|"
            r"next[- ]day delivery|same[- ]day|30[- ]dages? returret|\d+[- ]dages? (retur|fortrydelsesret)|"
            r"free returns|gratis retur|price match|prisgaranti|dansk (design|produceret)|"
            r"handmade|håndlavet|eco|bæredygtig|sustainable|eksklusiv|exclusive)\b",
            re.IGNORECASE,
        ),
    ),
    (
        "urgency",
        re.compile(
            r"\b(kun \d+ tilbage|only \d+ left|få på lager|low stock|limited|begrænset|"
            r"i dag|today only|ends? (today|soon|tonight)|slutter|udløber|expires?|"
            r"sidste chance|last chance|nu kun|now only|hurry|skynd dig|countdown|"
            r"tilbud(det)? gælder|while stocks last|så længe lager haves)\b",
            re.IGNORECASE,
        ),
    ),
    (
        "guarantee",
        re.compile(
            r"\b(garanti\w*|guarantee\w*|money[- ]back|pengene tilbage|returret|"
            r"fortrydelsesret|risk[- ]free|risikofri|no questions asked|full refund|"
            r"fuld refusion|tilfredshedsgaranti|satisfaction)\b",
            re.IGNORECASE,
        ),
    ),
    (
        "trust_text",
        re.compile(
            r"\b(sikker betaling|secure (payment|checkout)|ssl|krypteret|encrypted|"
            r"e-mærket|emaerket|tryg e-handel|trygt|certificeret|verified|verificeret|"
            r"mobilepay|visa|mastercard|paypal|klarna)\b",
            re.IGNORECASE,
        ),
    ),
    (
        "social_proof",
        re.compile(
            r"(trustpilot|anmeldelse\w*|reviews?|kunderne siger|testimonials?|stjerner|"
            r"\bstars?\b|rating|\d[\d.,]*\+?\s*(glade |tilfredse |happy |satisfied )?"
            r"(kunder|customers|brugere|users)|trusted by|★)",
            re.IGNORECASE,
        ),
    ),
    (
        "authority",
        re.compile(
            r"\b(as seen (in|on)|featured in|kendt fra|omtalt i|award\w*|prisvindende|"
            r"vinder af|winner|certified|certificering|iso \d+|anbefalet af|recommended by|"
            r"partner(ed)? with|officiel forhandler|official (partner|retailer)|ekspert\w*|expert\w*)\b",
            re.IGNORECASE,
        ),
    ),
    (
        "privacy",
        re.compile(
            r"\b(privatlivspolitik|privacy( policy)?|gdpr|persondata\w*|personal data|"
            r"data protection|databeskyttelse|cookiepolitik|cookie policy)\b",
            re.IGNORECASE,
        ),
    ),
    (
        "contact",
        re.compile(
            r"(\+?45[\s-]?)?\b\d{2}[\s-]?\d{2}[\s-]?\d{2}[\s-]?\d{2}\b|"
            r"[\w.+-]+@[\w-]+\.[\w.]+|\b(kontakt( os)?|contact( us)?|kundeservice|"
            r"customer (service|support)|ring til os|call us)\b",
            re.IGNORECASE,
        ),
    ),
]

CTA_ACTION_PATTERN = re.compile(
    r"\b(køb|buy|bestil|order|shop|tilføj|add|læg i kurv|start|prøv|try|get|få|"
    r"book|download|tilmeld|sign up|subscribe|opret|create|join|kom i gang|"
    r"get started|find|se|see|explore|udforsk|claim|hent|request|anmod|contact|kontakt)\b",
    re.IGNORECASE,
)

CTA_VAGUE_PATTERN = re.compile(
    r"^\s*(klik her|click here|læs mere|read more|mere|more|submit|send|indsend|"
    r"go|ok|her|here|next|næste|continue|fortsæt|learn more|info)\s*[.!›»>]*\s*$",
    re.IGNORECASE,
)

_SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+|\n+")


def split_sentences(text: str) -> List[str]:
    """Split page text into trimmed, non-trivial sentences."""
    sentences = []
    for raw in _SENTENCE_SPLIT.split(text or ""):
        sentence = " ".join(raw.split())
        if len(sentence) >= 3:
            sentences.append(sentence[:MAX_FRAGMENT_CHARS])
    return sentences


def tag_fragments(text: str) -> Dict[str, List[str]]:
    """Return tag -> matching sentences, in sentence order, bounded per tag."""
    index: Dict[str, List[str]] = {tag: [] for tag, _ in TEXT_PATTERNS}
    for sentence in split_sentences(text):
        for tag, pattern in TEXT_PATTERNS:
            bucket = index[tag]
            if len(bucket) < MAX_FRAGMENTS_PER_TAG and pattern.search(sentence):
                bucket.append(sentence)
    return index


class TextIndex:
    """Query interface over tagged page fragments."""

    def __init__(self, fragments: Dict[str, List[str]]):
        self._fragments = fragments

    @classmethod
    def from_text(cls, text: str) -> "TextIndex":
        return cls(tag_fragments(text))

    @classmethod
    def from_signals(cls, signals: ScrapedSignals) -> "TextIndex":
        # Headings and meta description are part of the readable copy too
        parts = [signals.meta_description]
        parts.extend(h.text for h in signals.headings)
        parts.append(signals.text_content)
        return cls.from_text("\n".join(p for p in parts if p))

    def fragments(self, tag: str) -> List[str]:
        return list(self._fragments.get(tag, []))

    def count(self, tag: str) -> int:
        return len(self._fragments.get(tag, []))

    def has(self, tag: str) -> bool:
        return self.count(tag) > 0
