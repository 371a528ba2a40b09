"""Sample library shown on first launch."""

from .models import Entry, Game


def sample_games() -> list[Game]:
    return [
        Game(
            id=1,
            title="The Legend of Zelda: Tears of the Kingdom",
            last_entry="2025-07-03",
            entries=[
                Entry(
                    id=1,
                    date="2025-07-03",
                    text=(
                        "Found a new shrine near the central tower. The puzzle involved moving "
                        "water with the ultrahand ability. Really clever design!"
                    ),
                ),
                Entry(
                    id=2,
                    date="2025-07-02",
                    text=(
                        "Defeated my first Lynel today! The strategy was to use perfect dodges "
                        "and then attack during the slow-mo. Took about 15 tries but finally got it."
                    ),
                ),
            ],
        ),
        Game(
            id=2,
            title="Spider-Man 2",
            last_entry="2025-07-01",
            entries=[
                Entry(
                    id=3,
                    date="2025-07-01",
                    text=(
                        "The web-swinging mechanics feel amazing. The new web wings add a whole "
                        "new dimension to traversal. Brooklyn Bridge area is beautifully detailed."
                    ),
                ),
            ],
        ),
    ]
