import numpy as np
import pytest

from pixel_mosaic.palette import Palette, Tile
from pixel_mosaic.selector import best_index
from pixel_mosaic.similarity import MeanColorScorer, StructuralScorer, make_scorer

from .conftest import BLUE, GREEN, RED, WHITE, solid


def random_palette(rng, count=6, size=8):
    return Palette([
        Tile.from_image(i, rng.random((size, size, 4)).astype(np.float32))
        for i in range(count)
    ])


def color_palette(size=2):
    return Palette([
        Tile.from_image(i, solid(color, size, size))
        for i, color in enumerate((RED, GREEN, BLUE, WHITE))
    ])


def winner(scorer, palette, image):
    window = scorer.prepare(image)
    scores = [scorer.score(window, tile) for tile in palette]
    return best_index(scores, [tile.id for tile in palette])


@pytest.mark.parametrize("scale", [0.05, 0.5, 1.0, 2.0])
def test_identical_tile_wins(rng, scale):
    palette = random_palette(rng)
    scorer = StructuralScorer(palette, scale)

    for index, tile in enumerate(palette):
        assert winner(scorer, palette, tile.image.copy()) == index


def test_identical_tile_score(rng):
    palette = random_palette(rng)
    scorer = StructuralScorer(palette, 0.5)
    tile = palette[2]

    score = scorer.score(scorer.prepare(tile.image.copy()), tile)

    assert score.value == pytest.approx(2.0 ** 0.5)
    assert score.penalty == pytest.approx(0.0, abs=1e-9)


def test_solid_windows_pick_matching_color():
    palette = color_palette()
    scorer = StructuralScorer(palette, 0.5)

    for index, color in enumerate((RED, GREEN, BLUE, WHITE)):
        assert winner(scorer, palette, solid(color, 2, 2)) == index


def test_scoring_does_not_mutate_tiles(rng):
    palette = random_palette(rng, count=3)
    before = [tile.image.copy() for tile in palette]
    scorer = StructuralScorer(palette, 1.0)

    window = scorer.prepare(rng.random((8, 8, 4)).astype(np.float32))
    for tile in palette:
        scorer.score(window, tile)

    for tile, image in zip(palette, before):
        np.testing.assert_array_equal(tile.image, image)
        assert tile.usage_count == 0


def test_structural_scorer_rejects_bad_scale(rng):
    with pytest.raises(ValueError):
        StructuralScorer(random_palette(rng, count=1), 0.0)


def test_mean_color_scorer_prefers_closest_mean():
    palette = color_palette()
    scorer = MeanColorScorer(palette)

    almost_blue = solid((0.1, 0.1, 0.8, 1.0), 2, 2)

    assert winner(scorer, palette, almost_blue) == 2


def test_make_scorer():
    palette = color_palette()

    assert isinstance(make_scorer("structural", palette, 1.0), StructuralScorer)
    assert isinstance(make_scorer("mean-color", palette, 1.0), MeanColorScorer)
    with pytest.raises(ValueError):
        make_scorer("histogram", palette, 1.0)


def test_lch_conversion_once_per_window_and_tile(rng, monkeypatch):
    from pixel_mosaic import similarity

    palette = random_palette(rng, count=5)
    calls = []
    original = similarity.to_lch
    def counting_to_lch(image):
        calls.append(1)
        return original(image)

    monkeypatch.setattr(similarity, "to_lch", counting_to_lch)

    scorer = StructuralScorer(palette, 0.5)
    assert len(calls) == len(palette)

    for _ in range(3):
        window = scorer.prepare(rng.random((8, 8, 4)).astype(np.float32))
        for tile in palette:
            scorer.score(window, tile)

    assert len(calls) == len(palette) + 3


def test_structural_penalty_matches_color_covariance(rng):
    from pixel_mosaic.metrics import color_covariance

    palette = random_palette(rng, count=2)
    scorer = StructuralScorer(palette, 0.5)
    image = rng.random((8, 8, 4)).astype(np.float32)

    score = scorer.score(scorer.prepare(image), palette[1])

    expected = abs(1.0 - color_covariance(image, palette[1].image).structure)
    assert score.penalty == pytest.approx(expected)
