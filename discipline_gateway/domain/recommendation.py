"""Recommendation synthesis from cost and discipline score results"""

from typing import Optional

from discipline_gateway.domain.models import (
    CostResult,
    CostType,
    DetailedRecommendation,
    Priority,
    RecommendationResult,
    ScoreComponents,
    ScoreResult,
)

CURRENCY_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£"}

# A component only counts as the primary issue below this score
WEAK_COMPONENT_THRESHOLD = 40
TIP_THRESHOLD = 50

INSUFFICIENT_DATA_MESSAGE = (
    "You need at least 2 conversions to receive a personalized recommendation. "
    "Keep tracking your wallet activity."
)


def format_currency(amount: float, currency: str) -> str:
    """Format like en-US currency output: $1,234.56, €1,234.56, otherwise 'CHF 1,234.56'"""
    code = currency.upper()
    sign = "-" if amount < 0 else ""
    symbol = CURRENCY_SYMBOLS.get(code)
    if symbol:
        return f"{sign}{symbol}{abs(amount):,.2f}"
    return f"{sign}{code} {abs(amount):,.2f}"


def get_primary_issue(components: ScoreComponents) -> Optional[str]:
    """Lowest scoring component if it is weak enough to call out (first listed wins ties)"""
    scores = [
        ("frequency", components.frequency_score),
        ("consistency", components.consistency_score),
        ("timing", components.timing_score),
    ]
    issue, lowest = min(scores, key=lambda item: item[1])
    return issue if lowest < WEAK_COMPONENT_THRESHOLD else None


def generate_recommendation(cost_result: CostResult, score_result: ScoreResult) -> RecommendationResult:
    """
    Pick one sentence of advice. Rules are checked in order, first match wins:

    1. fewer than 2 conversions → ask for more data
    2. high score with small savings → already disciplined
    3. loss over 5 → name the weakest component and the loss
    4. savings over 5 → actual strategy beats the rule
    5. small amount → minor adjustments
    6. any other positive amount → keep going
    7. zero → equivalent to the rule
    """
    amount = cost_result.cost_or_saved_amount
    count = cost_result.conversion_count

    if count < 2:
        return RecommendationResult(recommendation=INSUFFICIENT_DATA_MESSAGE)

    if score_result.score >= 80 and cost_result.cost_type == CostType.SAVED and amount < 10:
        return RecommendationResult(
            recommendation=(
                "You're already following excellent conversion habits! "
                "Keep up the disciplined approach to maintain your savings."
            )
        )

    if cost_result.cost_type == CostType.LOST and amount > 5:
        formatted = format_currency(amount, cost_result.currency)
        issue = get_primary_issue(score_result.components)

        if issue == "frequency":
            message = (
                f"You convert too frequently ({count} times), costing you approximately {formatted}. "
                "Following a monthly discipline rule would reduce these losses."
            )
        elif issue == "consistency":
            message = (
                f"Your conversion amounts vary too much, resulting in losses of about {formatted}. "
                "Converting a fixed percentage monthly would improve your results."
            )
        elif issue == "timing":
            message = (
                f"Your conversion timing is irregular, costing you approximately {formatted}. "
                "Converting on a consistent day each month would reduce these losses."
            )
        else:
            message = (
                "Your conversion habits could be more disciplined. "
                f"Following a monthly rule would have saved you approximately {formatted}."
            )
        return RecommendationResult(recommendation=message)

    if cost_result.cost_type == CostType.SAVED and amount > 5:
        formatted = format_currency(amount, cost_result.currency)
        return RecommendationResult(
            recommendation=(
                "Great job! Your conversion strategy is actually saving you money compared to a "
                f"strict monthly rule - approximately {formatted} in this period."
            )
        )

    if 0 < amount <= 5:
        return RecommendationResult(
            recommendation=(
                "Your conversion habits are reasonably good. Minor adjustments to timing or "
                "amount consistency could marginally improve results."
            )
        )

    if amount > 0:
        return RecommendationResult(
            recommendation=(
                "Your disciplined approach is working well. Keep maintaining your consistent "
                "conversion schedule to maximize savings."
            )
        )

    return RecommendationResult(
        recommendation=(
            "Your conversion behavior is roughly equivalent to following a disciplined monthly rule. "
            "Consider experimenting with timing to potentially improve results."
        )
    )


def get_detailed_recommendation(cost_result: CostResult, score_result: ScoreResult) -> DetailedRecommendation:
    """Recommendation plus a priority and actionable tips for the weakest component"""
    base = generate_recommendation(cost_result, score_result)
    components = score_result.components
    issue = get_primary_issue(components)

    tips = []
    priority = Priority.LOW

    if issue == "frequency" and components.frequency_score < TIP_THRESHOLD:
        tips.append("Set a calendar reminder for the same day each month")
        tips.append("Consider automating conversions through a smart contract or recurring payment")
        priority = Priority.HIGH

    if issue == "consistency" and components.consistency_score < TIP_THRESHOLD:
        tips.append("Calculate your average monthly expenses and convert that fixed amount")
        tips.append("Use 50% of your stablecoin balance as a simple rule of thumb")
        priority = Priority.HIGH if priority == Priority.HIGH else Priority.MEDIUM

    if issue == "timing" and components.timing_score < TIP_THRESHOLD:
        tips.append("Choose a specific date (e.g., 1st of month) and stick to it")
        tips.append("Avoid converting during high-volatility periods")
        priority = Priority.HIGH if priority == Priority.HIGH else Priority.MEDIUM

    if not tips:
        tips = ["Your discipline is good! Keep up the consistent approach."]

    return DetailedRecommendation(
        recommendation=base.recommendation,
        priority=priority,
        actionable_tips=tips,
    )
