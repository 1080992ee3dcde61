"""Movies — a JSON API described as a route tree.

An in-memory movie store behind three producers. Each producer checks
its own configuration when the tree is resolved, so a missing store
stops startup with the position of the route that needed it instead of
failing on the first request::

    /movies              GET   list movies
    /movies              POST  create a movie
    /movies/{movie_id}   GET   get one movie

Run:
    cd examples/movies && python app.py
    trellis check app:root
"""

import threading
from collections.abc import Callable
from dataclasses import asdict, dataclass, replace
from typing import Protocol

from trellis import Context, Engine
from trellis.tree import Route, Router, RouterSpec, RouteSpec

PARAM_MOVIE_ID = "movie_id"


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class MovieRecord:
    id: int
    title: str
    year: int = 0


class MovieStore(Protocol):
    def create(self, movie: MovieRecord) -> MovieRecord: ...

    def load(self, movie_id: int) -> MovieRecord | None: ...

    def load_or_store(self, movie_id: int, movie: MovieRecord) -> tuple[MovieRecord, bool]: ...

    def range(self, fn: Callable[[int, MovieRecord], bool]) -> None: ...

    def store(self, movie_id: int, movie: MovieRecord) -> None: ...

    def delete(self, movie_id: int) -> bool: ...


class MemoryMovieStore:
    """Thread-safe in-memory store; ids are allocated from 0 upwards."""

    def __init__(self) -> None:
        self._movies: dict[int, MovieRecord] = {}
        self._next_id = 0
        self._id_lock = threading.Lock()
        self._lock = threading.Lock()

    def create(self, movie: MovieRecord) -> MovieRecord:
        """Store a copy of *movie* under the next free id and return it."""
        with self._id_lock:
            to_store = replace(movie, id=self._next_id)
            actual, loaded = self.load_or_store(to_store.id, to_store)
            if loaded or actual is not to_store:
                msg = f"movie id {to_store.id} is already taken"
                raise RuntimeError(msg)
            self._next_id += 1
            return to_store

    def load(self, movie_id: int) -> MovieRecord | None:
        with self._lock:
            return self._movies.get(movie_id)

    def load_or_store(self, movie_id: int, movie: MovieRecord) -> tuple[MovieRecord, bool]:
        """Return ``(existing, True)`` or store *movie* and return ``(movie, False)``."""
        with self._lock:
            existing = self._movies.get(movie_id)
            if existing is not None:
                return existing, True
            self._movies[movie_id] = movie
            return movie, False

    def range(self, fn: Callable[[int, MovieRecord], bool]) -> None:
        """Call *fn* for each movie in id order until it returns False."""
        if fn is None:
            msg = "MemoryMovieStore.range requires a callback"
            raise TypeError(msg)
        with self._lock:
            snapshot = sorted(self._movies.items())
        for movie_id, movie in snapshot:
            if not fn(movie_id, movie):
                break

    def store(self, movie_id: int, movie: MovieRecord) -> None:
        """Insert or overwrite the movie at *movie_id*."""
        with self._lock:
            self._movies[movie_id] = movie

    def delete(self, movie_id: int) -> bool:
        """Remove a movie; False if there was nothing to remove."""
        with self._lock:
            return self._movies.pop(movie_id, None) is not None


def _failure(ctx: Context, status: int, message: str, error: str) -> None:
    ctx.json(status, {"message": message, "error": error, "code": status})


# ---------------------------------------------------------------------------
# Route tree
# ---------------------------------------------------------------------------


class Movie:
    """``/{movie_id}`` — a single movie."""

    def __init__(self, store: MovieStore | None) -> None:
        self.store = store

    def router(self) -> Router:
        return Router(lambda: RouterSpec(f"/{{{PARAM_MOVIE_ID}}}", routes=[self.get()]))

    def get(self) -> Route:
        def produce() -> RouteSpec:
            if self.store is None:
                return RouteSpec("GET", "", error="Movie.get: movie store must be set")
            return RouteSpec("GET", "", [self._get])

        return Route(produce)

    def _get(self, ctx: Context) -> None:
        try:
            movie_id = int(ctx.param(PARAM_MOVIE_ID))
        except ValueError as exc:
            _failure(ctx, 400, "movie id must be an int", str(exc))
            return
        movie = self.store.load(movie_id)
        if movie is None:
            _failure(ctx, 404, "movie not found", "movie does not exist")
            return
        ctx.json(200, asdict(movie))


class Movies:
    """``/movies`` — the collection, plus the single-movie subtree."""

    def __init__(self, store: MovieStore | None) -> None:
        self.store = store

    def router(self) -> Router:
        return Router(
            lambda: RouterSpec(
                "/movies",
                routes=[self.get(), self.post()],
                routers=[Movie(self.store).router()],
            )
        )

    def get(self) -> Route:
        def produce() -> RouteSpec:
            if self.store is None:
                return RouteSpec("GET", "", error="Movies.get: movie store must be set")
            return RouteSpec("GET", "", [self._list])

        return Route(produce)

    def post(self) -> Route:
        def produce() -> RouteSpec:
            if self.store is None:
                return RouteSpec("POST", "", error="Movies.post: movie store must be set")
            return RouteSpec("POST", "", [self._create])

        return Route(produce)

    def _list(self, ctx: Context) -> None:
        movies: list[dict] = []

        def collect(_movie_id: int, movie: MovieRecord) -> bool:
            movies.append(asdict(movie))
            return True

        self.store.range(collect)
        ctx.json(200, movies)

    async def _create(self, ctx: Context) -> None:
        try:
            body = await ctx.request.json()
            movie = MovieRecord(id=0, title=str(body["title"]), year=int(body.get("year", 0)))
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            _failure(ctx, 400, "failed to parse request", str(exc))
            return
        stored = self.store.create(movie)
        ctx.json(201, asdict(stored))


class Root:
    """The whole API, rooted at ``/``."""

    def __init__(self, store: MovieStore | None) -> None:
        self.store = store

    def router(self) -> Router:
        return Router(lambda: RouterSpec("", routers=[Movies(self.store).router()]))


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

root = Root(MemoryMovieStore()).router()

engine = Engine()
engine.mount(root)


if __name__ == "__main__":
    engine.run()
