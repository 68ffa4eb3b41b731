"""Layer 3 - lexical scam pattern recognition over the raw segment text"""

from momo_guard.domain.models import LAYER_NAMES, LayerStatus, PatternResult

SCAM_KEYWORDS = (
    "urgent",
    "verify",
    "suspended",
    "click",
    "link",
    "prize",
    "winner",
    "claim",
    "confirm",
    "update",
    "action required",
    "account compromised",
)

# Institutions scammers impersonate in Ghana
IMPERSONATED_INSTITUTIONS = (
    "Bank of Ghana",
    "GRA",
    "SSNIT",
    "ECG",
    "Ghana Water",
    "Police",
    "Court",
)

SUSPICIOUS_PHRASES = (
    "tax payment",
    "clearance fee",
    "processing fee",
    "activation fee",
)

KEYWORD_WEIGHT = 10
INSTITUTION_SCORE = 30  # flat, not per hit
PHRASE_WEIGHT = 20


def _hits(upper_text: str, lexicon) -> tuple:
    return tuple(term for term in lexicon if term.upper() in upper_text)


def analyze_patterns(text: str) -> PatternResult:
    """
    Score scam keywords, impersonated institutions and suspicious phrases.

    keyword_score = min(100, hits x 10); institution_score = 30 if any;
    phrase_score = 20 x hits; total capped at 100.
    """
    upper = text.upper()
    keywords = _hits(upper, SCAM_KEYWORDS)
    institutions = _hits(upper, IMPERSONATED_INSTITUTIONS)
    phrases = _hits(upper, SUSPICIOUS_PHRASES)

    keyword_score = min(100, len(keywords) * KEYWORD_WEIGHT)
    institution_score = INSTITUTION_SCORE if institutions else 0
    phrase_score = len(phrases) * PHRASE_WEIGHT
    total = min(100, keyword_score + institution_score + phrase_score)

    factors = []
    if keywords:
        factors.append(f"{len(keywords)} scam keywords detected")
    if institutions:
        factors.append("Impersonated institution mentioned")
    if phrases:
        factors.append("Suspicious payment phrases detected")

    return PatternResult(
        layer=3,
        name=LAYER_NAMES[3],
        status=LayerStatus.WARNING if total > 0 else LayerStatus.PASS,
        score=total,
        factors=tuple(factors),
        keyword_hits=keywords,
        institution_hits=institutions,
        phrase_hits=phrases,
        keyword_score=keyword_score,
        institution_score=institution_score,
        phrase_score=phrase_score,
    )
