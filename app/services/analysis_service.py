"""
Reading analysis: heuristic statistics over a user's books.

Pure functions over a list of Book rows; no database access. The only
non-deterministic step is the motivational message, drawn from a fixed
candidate list with an injectable random.Random.
"""
import random
from datetime import datetime, UTC

from models import Book, ReadingStatus, as_utc

FINISHED = ReadingStatus.FINISHED.value
READING = ReadingStatus.READING.value
WANT_TO_READ = ReadingStatus.WANT_TO_READ.value

MAX_RECOMMENDATIONS = 3
MAX_STREAK_DAYS = 14
MONTHLY_PROGRESS_CAP = 10

DEFAULT_ANALYSIS = {
    "completionRate": 0.0,
    "readingPattern": "Just getting started - add some books to begin your reading journey!",
    "recommendations": [
        "Start by adding a few books you're interested in",
        "Set a small goal like reading 1 book per month",
        "Choose a mix of fiction and non-fiction to explore different styles",
    ],
    "readingSpeed": "Add and finish books to track your reading pace",
    "favoriteGenres": ["Discovering preferences"],
    "readingStreak": 0,
    "motivationalInsight": "Every reading journey begins with a single page - start yours today!",
}


def _count(books: list[Book], status: str) -> int:
    return sum(1 for b in books if b.reading_status == status)


def months_since_first_book(books: list[Book], now: datetime) -> int:
    """Whole calendar months since the earliest date_added, at least 1."""
    if not books:
        return 1
    first = min(as_utc(b.date_added) for b in books)
    months = (now.year - first.year) * 12 + now.month - first.month
    return max(months, 1)


def completion_rate(books: list[Book]) -> float:
    if not books:
        return 0.0
    return round(_count(books, FINISHED) / len(books) * 100, 1)


def reading_pattern(books: list[Book], now: datetime) -> str:
    finished = _count(books, FINISHED)
    if finished < 2:
        return "Building your reading foundation - keep adding books!"

    patterns = []
    per_month = finished / months_since_first_book(books, now)
    if per_month >= 3:
        patterns.append("highly consistent reader")
    elif per_month >= 1.5:
        patterns.append("steady reading pace")
    else:
        patterns.append("casual reading style")

    favorite_rate = sum(1 for b in books if b.is_favorite) / len(books)
    if favorite_rate > 0.3:
        patterns.append("enthusiastic about most reads")
    elif favorite_rate > 0.15:
        patterns.append("selective with favorites")
    else:
        patterns.append("highly discerning reader")
    return ", ".join(patterns)


def recommendations(books: list[Book]) -> list[str]:
    reading = _count(books, READING)
    want_to_read = _count(books, WANT_TO_READ)
    result = []

    if reading > 5:
        result.append("Consider focusing on fewer books at once for better retention")
    elif reading == 0 and want_to_read > 0:
        result.append("Pick up one of your 'Want to Read' books and start today!")
    elif reading < 2 and want_to_read > 10:
        result.append("You have a great reading list - start with the one that excites you most")

    rate = completion_rate(books)
    if rate < 30:
        result.append("Try shorter books or audiobooks to build momentum")
    elif rate > 80:
        result.append("Excellent completion rate! Consider challenging yourself with longer classics")

    authors = {b.author for b in books}
    if len(authors) < len(books) * 0.7:
        result.append("Explore books by new authors to diversify your reading experience")

    if not result:
        result.append("Keep up the great reading habit! Consider joining a book club for social motivation")
    return result[:MAX_RECOMMENDATIONS]


def reading_speed(books: list[Book], now: datetime) -> str:
    finished = _count(books, FINISHED)
    if finished == 0:
        return "Start finishing books to track your reading speed"

    per_month = round(finished / months_since_first_book(books, now), 1)
    if per_month >= 4:
        return f"Excellent: {per_month} books/month - You're a reading machine!"
    if per_month >= 2:
        return f"Great: {per_month} books/month - Above average pace"
    if per_month >= 1:
        return f"Good: {per_month} books/month - Steady reading habit"
    return f"Developing: {per_month} books/month - Room for growth"


def favorite_genres(books: list[Book]) -> list[str]:
    # No genre data is stored; derived from how many favorites there are
    favorites = sum(1 for b in books if b.is_favorite)
    if not favorites:
        return ["Still discovering preferences"]
    genres = ["Fiction"]
    if favorites > 2:
        genres.append("Mystery")
    if favorites > 4:
        genres.append("Science Fiction")
    return genres


def reading_streak(books: list[Book]) -> int:
    finished = _count(books, FINISHED)
    return min(min(finished, 5) * 2, MAX_STREAK_DAYS)


def motivational_candidates(books: list[Book]) -> list[str]:
    """The fixed set the motivational insight is picked from."""
    finished = _count(books, FINISHED)
    candidates = [
        f"You've built a library of {len(books)} books - that's impressive dedication!",
        f"With {finished} completed reads, you're expanding your knowledge daily",
        "Every book you read makes you a more interesting person",
        "Reading is the fastest way to live multiple lives and gain diverse perspectives",
        "Your future self will thank you for every book you read today",
    ]
    if finished >= 10:
        candidates.append("You're officially a bibliophile - wear that badge with pride!")
    elif finished >= 5:
        candidates.append("You're developing an excellent reading habit - keep it up!")
    return candidates


def analyze_reading_patterns(
    books: list[Book],
    rng: random.Random | None = None,
    now: datetime | None = None,
) -> dict:
    """Summary used by the reading-analysis endpoint."""
    if not books:
        return {
            **DEFAULT_ANALYSIS,
            "recommendations": list(DEFAULT_ANALYSIS["recommendations"]),
            "favoriteGenres": list(DEFAULT_ANALYSIS["favoriteGenres"]),
        }
    rng = rng or random.Random()
    now = now or datetime.now(UTC)
    return {
        "completionRate": completion_rate(books),
        "readingPattern": reading_pattern(books, now),
        "recommendations": recommendations(books),
        "readingSpeed": reading_speed(books, now),
        "favoriteGenres": favorite_genres(books),
        "readingStreak": reading_streak(books),
        "motivationalInsight": rng.choice(motivational_candidates(books)),
    }


def goal_suggestions(books: list[Book], now: datetime) -> list[str]:
    finished_this_month = 0
    for b in books:
        added = as_utc(b.date_added)
        if b.reading_status == FINISHED and (added.year, added.month) == (now.year, now.month):
            finished_this_month += 1
    reading = _count(books, READING)
    suggestions = []

    if finished_this_month == 0:
        suggestions.append("Aim to finish at least 1 book this month")
    elif finished_this_month >= 3:
        suggestions.append("You're exceeding expectations! Consider a slightly higher monthly goal")

    if reading == 0:
        suggestions.append("Start reading a book from your 'Want to Read' list")
    elif reading > 3:
        suggestions.append("Focus on finishing current books before starting new ones")
    return suggestions


def detailed_insights(
    books: list[Book],
    rng: random.Random | None = None,
    now: datetime | None = None,
) -> dict:
    """Basic analysis plus collection stats and goal progress."""
    now = now or datetime.now(UTC)
    added = [(as_utc(b.date_added), b) for b in books]
    finished = _count(books, FINISHED)
    total = len(books)

    return {
        "basicAnalysis": analyze_reading_patterns(books, rng=rng, now=now),
        "detailedStats": {
            "totalBooks": total,
            "booksThisYear": sum(1 for d, _ in added if d.year == now.year),
            "booksThisMonth": sum(
                1 for d, _ in added if d.year == now.year and d.month == now.month
            ),
            "averageReadingPace": (
                round(finished / months_since_first_book(books, now), 1) if total else 0
            ),
            "favoritePercentage": (
                round(sum(1 for b in books if b.is_favorite) / total * 100, 1) if total else 0
            ),
        },
        "readingGoalProgress": {
            "monthlyProgress": min(
                sum(
                    1 for d, b in added
                    if b.reading_status == FINISHED and d.year == now.year and d.month == now.month
                ),
                MONTHLY_PROGRESS_CAP,
            ),
            "yearlyProgress": sum(
                1 for d, b in added if b.reading_status == FINISHED and d.year == now.year
            ),
            "suggestions": goal_suggestions(books, now),
        },
    }
