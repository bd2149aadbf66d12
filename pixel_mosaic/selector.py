import math
from concurrent.futures import ThreadPoolExecutor

# Relative tolerance under which two scores count as equal.
SCORE_TOLERANCE = 1e-9


def best_index(scores, tile_ids, tolerance=SCORE_TOLERANCE):
    """
    Index of the winning score.

    NaN scores rank below every number. Scores within ``tolerance`` of the
    maximum are tied; ties go to the lowest penalty, then the lowest tile id.
    """
    if not scores:
        raise ValueError("No scores to choose from")

    values = [
        -math.inf if math.isnan(score.value) else score.value
        for score in scores
    ]
    top = max(values)
    if top == -math.inf:
        candidates = range(len(scores))
    else:
        margin = tolerance * max(1.0, abs(top))
        candidates = [i for i, value in enumerate(values) if value >= top - margin]

    return min(
        candidates,
        key=lambda i: (
            math.inf if math.isnan(scores[i].penalty) else scores[i].penalty,
            tile_ids[i],
        ),
    )


class TileSelector:
    """
    Scores a window against the whole palette on a worker pool and returns
    the best tile.

    The scan is read-only: no tile is touched while scores are computed.
    """

    def __init__(self, palette, scorer, executor=None, tolerance=SCORE_TOLERANCE):
        self.palette = palette
        self.scorer = scorer
        self.tolerance = tolerance
        self._executor = executor
        self._tile_ids = [tile.id for tile in palette]

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def close(self):
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    @classmethod
    def with_threads(cls, palette, scorer, threads):
        return cls(palette, scorer, ThreadPoolExecutor(max_workers=max(1, threads)))

    def scores(self, window):
        def score(tile):
            return self.scorer.score(window, tile)

        if self._executor is None:
            return [score(tile) for tile in self.palette]
        return list(self._executor.map(score, self.palette))

    def select(self, image):
        """Best palette tile for a window image."""
        window = self.scorer.prepare(image)
        scores = self.scores(window)
        return self.palette[best_index(scores, self._tile_ids, self.tolerance)]
