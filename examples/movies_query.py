"""
Lazily page through the movies of one year in the AWS "Movies" table.

Following the official AWS DynamoDB Getting Started guide:
https://docs.aws.amazon.com/amazondynamodb/latest/developerguide/GettingStartedDynamoDB.html
"""

import logging
from typing import Any

from pydantic import BaseModel

from lazyloader import DynamoQueryDao, LazyLoader, LoaderOptions, MeterManager


class Movie(BaseModel):
    """Movie row with composite key (year + title)"""

    year: int
    title: str
    plot: str | None = None
    rating: float | None = None
    actors: list[str] | None = None
    info: dict[str, Any] | None = None


logging.basicConfig(level=logging.DEBUG)

meters = MeterManager()
dao = DynamoQueryDao(Movie, "Movies", pk_name="year")

# Batches of 10 are fetched only as the loop needs them
loader = LazyLoader.from_options(2013, dao, LoaderOptions(batch_size=10), meters)

if loader.is_empty():
    print("No movies for 2013")

for movie in loader:
    print(f"{movie.title} ({movie.rating})")

print(meters.meters())

# Small result sets can be read in one go
everything = LazyLoader(2013, dao)
print(f"{len(everything.all())} movies, all loaded: {everything.is_all_loaded()}")
