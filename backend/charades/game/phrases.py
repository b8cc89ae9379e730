from __future__ import annotations

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


DEFAULT_PHRASES = [
    "The Lion King",
    "Finding Nemo",
    "Jurassic Park",
    "Titanic",
    "Star Wars",
    "The Matrix",
    "Back to the Future",
    "Jaws",
    "Frozen",
    "Toy Story",
    "The Wizard of Oz",
    "Harry Potter",
    "The Godfather",
    "Ghostbusters",
    "Home Alone",
    "Shrek",
    "Up",
    "Cars",
    "Inception",
    "Gravity",
    "Spider-Man",
    "Black Panther",
    "The Little Mermaid",
    "Beauty and the Beast",
    "Pirates of the Caribbean",
    "Indiana Jones",
    "The Incredibles",
    "Monsters, Inc.",
    "Ratatouille",
    "WALL-E",
    "Coco",
    "Moana",
    "Aladdin",
    "Snow White",
    "King Kong",
    "Godzilla",
    "Men in Black",
    "Independence Day",
    "The Terminator",
    "Top Gun",
    "Rocky",
    "Forrest Gump",
    "The Silence of the Lambs",
    "Pulp Fiction",
    "Fight Club",
    "The Lord of the Rings",
    "The Hunger Games",
    "Twilight",
    "Avatar",
    "Mamma Mia!",
    "Grease",
    "Dirty Dancing",
    "Psycho",
    "The Shining",
    "Ghost",
    "Ice Age",
    "Kung Fu Panda",
    "Despicable Me",
    "Minions",
    "Inside Out",
    "Zootopia",
    "Finding Dory",
    "Mary Poppins",
    "Cinderella",
    "Jumanji",
    "Twister",
    "Armageddon",
    "Speed",
    "Die Hard",
    "E.T. the Extra-Terrestrial",
    "Edward Scissorhands",
    "Charlie and the Chocolate Factory",
    "Night at the Museum",
    "Pretty Woman",
    "Notting Hill",
    "Love Actually",
    "Barbie",
    "Oppenheimer",
    "Dune",
    "Joker",
]


def load_phrases(path: str | None = None) -> list[str]:
    """Load the phrase list from a JSON file, falling back to the built-in set.

    The file holds either a plain list of strings or an object whose
    ``"Movies"`` key is that list.
    """
    if not path:
        return list(DEFAULT_PHRASES)

    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("Movies")

    phrases = [p.strip() for p in (data or []) if isinstance(p, str) and p.strip()]
    if not phrases:
        raise ValueError(f"no phrases found in {path}")

    logger.info("loaded %d phrases from %s", len(phrases), path)
    return phrases
