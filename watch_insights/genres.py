from typing import Tuple

GENRE_LABELS: Tuple[str, ...] = (
    "Action & Thriller",
    "Drama & Romance",
    "Comedy",
    "Documentary",
    "Kids & Family",
    "Anime",
    "Horror",
    "Sci-Fi & Fantasy",
    "Series",
    "General Entertainment",
)

# first hit wins, so order matters (e.g. "hero academia" loses to "hero")
GENRE_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Action & Thriller", ("action", "mission", "spy", "hero", "battle", "war", "thriller", "heist")),
    ("Drama & Romance", ("drama", "romance", "love", "heart", "wedding", "affair")),
    ("Comedy", ("comedy", "funny", "laugh", "sitcom", "stand-up", "joke")),
    ("Documentary", ("documentary", "docuseries", "true crime", "history", "planet", "nature")),
    ("Kids & Family", ("kids", "family", "animated", "cartoon", "adventures")),
    ("Anime", ("anime", "manga", "naruto", "attack on titan", "demon", "hero academia")),
    ("Horror", ("horror", "ghost", "haunting", "zombie", "haunted")),
    ("Sci-Fi & Fantasy", ("sci-fi", "space", "galaxy", "future", "robot", "fantasy", "magic")),
)

DEFAULT_GENRE = "General Entertainment"


def infer_genre(title: str, attributes: str = "") -> str:
    """Keyword heuristic over title + attributes. Not a ground-truth classifier."""
    haystack = f"{title or ''} {attributes or ''}".lower()
    for genre, keywords in GENRE_KEYWORDS:
        if any(k in haystack for k in keywords):
            return genre
    if "season" in haystack or "episode" in haystack:
        return "Series"
    if "documentary" in haystack:
        return "Documentary"
    return DEFAULT_GENRE
