"""
Keyword Classifier - rule-based category and urgency suggestions
Hand-authored keyword tables, no trained model involved
"""

from typing import Dict, List, Optional, Tuple
from helpradar.models.post import Category, ClassificationSuggestion, Urgency

HIGH_URGENCY_KEYWORDS: List[str] = [
    "urgent", "emergency", "critical", "asap", "immediately", "dying",
    "accident", "hospital", "life-threatening", "serious", "desperate",
    "please help", "need now", "right now", "today only", "911"
]

MEDIUM_URGENCY_KEYWORDS: List[str] = [
    "soon", "quickly", "fast", "needed", "important", "help needed",
    "required", "looking for", "seeking"
]

BLOOD_KEYWORDS: List[str] = [
    "blood", "donor", "donation", "transfusion", "plasma", "platelets",
    "a+", "b+", "o+", "ab+", "a-", "b-", "o-", "ab-",
    "a positive", "b positive", "o positive", "ab positive",
    "a negative", "b negative", "o negative", "ab negative",
    "blood bank", "blood type", "blood group", "units of blood"
]

LOST_KEYWORDS: List[str] = [
    "lost", "missing", "stolen", "forgot", "left behind", "misplaced",
    "wallet", "phone", "keys", "bag", "laptop", "id card", "passport",
    "reward", "finder", "if found", "please return", "last seen",
    "lost and found", "dropped"
]

OFFER_KEYWORDS: List[str] = [
    "offer", "free", "donate", "giving away", "volunteer", "help available",
    "available", "can help", "willing to", "providing", "sharing",
    "teaching", "tutoring", "mentoring", "assistance offered",
    "food distribution", "free service", "pro bono"
]

HELP_KEYWORDS: List[str] = [
    "need help", "help needed", "looking for", "seeking", "required",
    "assistance", "support", "aid", "elderly", "senior citizen",
    "disability", "medical", "medicine", "grocery", "food",
    "shelter", "accommodation", "transport", "ride"
]

HIGH_URGENCY_WEIGHT = 2
MEDIUM_URGENCY_WEIGHT = 1
HIGH_URGENCY_THRESHOLD = 3

# Evaluation order doubles as the tie-break order: earlier entries win equal scores
CATEGORY_RULES: List[Tuple[Category, List[str], int]] = [
    (Category.BLOOD_NEEDED, BLOOD_KEYWORDS, 3),
    (Category.ITEM_LOST, LOST_KEYWORDS, 2),
    (Category.OFFER, OFFER_KEYWORDS, 2),
    (Category.HELP_NEEDED, HELP_KEYWORDS, 1),
]

CONFIDENCE_PER_KEYWORD = 15
CATEGORY_MATCH_BONUS = 30

class KeywordClassifier:
    """
    Suggests a category and urgency for free text
    - Weighted keyword counting for urgency and category
    - Blood requests are always high urgency
    - Never fails: empty text degrades to a zero-confidence default
    """

    def __init__(self, category_rules: Optional[List[Tuple[Category, List[str], int]]] = None):
        self.category_rules = category_rules or CATEGORY_RULES

    def score_urgency(self, text: str, detected: List[str]) -> int:
        """Accumulate urgency weight for every urgency keyword present"""
        score = 0
        for keyword in HIGH_URGENCY_KEYWORDS:
            if keyword in text:
                score += HIGH_URGENCY_WEIGHT
                detected.append(keyword)
        for keyword in MEDIUM_URGENCY_KEYWORDS:
            if keyword in text:
                score += MEDIUM_URGENCY_WEIGHT
                detected.append(keyword)
        return score

    def score_categories(self, text: str, detected: List[str]) -> Dict[Category, int]:
        """Accumulate per-category weight, in rule order"""
        scores: Dict[Category, int] = {}
        for category, keywords, weight in self.category_rules:
            scores[category] = 0
            for keyword in keywords:
                if keyword in text:
                    scores[category] += weight
                    if keyword not in detected:
                        detected.append(keyword)
        return scores

    def classify(self, title: str, description: str) -> ClassificationSuggestion:
        text = f"{title or ''} {description or ''}".lower()
        detected: List[str] = []
        reasons: List[str] = []

        urgency_score = self.score_urgency(text, detected)
        if urgency_score >= HIGH_URGENCY_THRESHOLD:
            urgency = Urgency.HIGH
            reasons.append("High urgency keywords detected")
        elif urgency_score <= 0:
            urgency = Urgency.LOW
            reasons.append("No urgency indicators found")
        else:
            urgency = Urgency.MEDIUM

        category_scores = self.score_categories(text, detected)
        category = Category.HELP_NEEDED
        best_score = 0
        for candidate, score in category_scores.items():
            # Strictly greater keeps the earlier rule on ties
            if score > best_score:
                best_score = score
                category = candidate

        if best_score > 0:
            reasons.append(f'Category "{category.value}" detected based on keywords')
        else:
            reasons.append(f'Defaulting to "{Category.HELP_NEEDED.value}" category')

        if category == Category.BLOOD_NEEDED and urgency != Urgency.HIGH:
            urgency = Urgency.HIGH
            reasons.append("Blood donation requests are automatically marked high urgency")

        # Nothing matched at all: fall back to the documented neutral default
        if not detected:
            urgency = Urgency.MEDIUM
            reasons = ["No keywords detected, using default category and urgency"]

        bonus = CATEGORY_MATCH_BONUS if best_score > 0 else 0
        confidence = min(100, len(detected) * CONFIDENCE_PER_KEYWORD + bonus)

        return ClassificationSuggestion(
            suggestedCategory=category,
            suggestedUrgency=urgency,
            confidenceScore=confidence,
            detectedKeywords=detected,
            reasoning=". ".join(reasons)
        )

# Shared instance, the classifier holds no mutable state
keyword_classifier = KeywordClassifier()

def classify(title: str, description: str) -> ClassificationSuggestion:
    """Classify free text into a category/urgency suggestion"""
    return keyword_classifier.classify(title, description)
