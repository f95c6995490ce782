import numpy as np
import pytest

from ascii_motion.clahe import apply_clahe, clip_histogram, tile_grid, tile_mappings


@pytest.mark.parametrize("length, tile_size, expected", [
    (16, 8, (2, 8)),
    (5, 8, (2, 2)),
    (20, 8, (2, 10)),
    (40, 8, (5, 8)),
])
def test_tile_grid(length, tile_size, expected):
    assert tile_grid(length, tile_size) == expected


def test_clip_histogram_redistributes_excess():
    histogram = np.zeros(256, dtype=np.int64)
    histogram[128] = 64
    clipped = clip_histogram(histogram, 4.0, 64)

    assert clipped.sum() == 64
    assert clipped[128] == 1
    assert (clipped[:63] == 1).all()
    assert clipped[63:128].sum() == 0


def test_clip_histogram_spreads_whole_shares():
    histogram = np.zeros(256, dtype=np.int64)
    histogram[0] = 1000
    clipped = clip_histogram(histogram, 1.0, 1000)
    # limit round(1000 / 256) = 4, excess 996 = 3 * 256 + 228
    assert clipped.sum() == 1000
    assert clipped[0] == 4 + 3 + 1
    assert clipped[227] == 4 and clipped[228] == 3


def test_flat_field_maps_to_white():
    gray = np.full((16, 16), 128.0)
    mappings = tile_mappings(gray, 8, 4.0)
    assert mappings.shape == (2, 2, 256)
    np.testing.assert_allclose(mappings[:, :, 128], 255.0)

    enhanced = apply_clahe(gray, 8, 4.0)
    np.testing.assert_allclose(enhanced, 255.0)


def test_output_range_and_shape():
    rng = np.random.default_rng(3)
    gray = rng.uniform(0, 255, (23, 37))
    enhanced = apply_clahe(gray, 8, 2.0)
    assert enhanced.shape == gray.shape
    assert enhanced.min() >= 0.0
    assert enhanced.max() <= 255.0 + 1e-9


def test_enhancement_preserves_order_within_a_tile():
    gray = np.tile(np.linspace(0, 255, 16), (16, 1))
    enhanced = apply_clahe(gray, 16, 4.0)
    # Single 2x2 grid; the last tile uses its own mapping, which is monotonic
    corner = enhanced[8:, 8:]
    assert (np.diff(corner, axis=1) >= 0).all()


@pytest.mark.parametrize("shape", [(1, 10), (10, 1), (1, 1)])
def test_degenerate_fields_are_returned_unchanged(shape):
    gray = np.full(shape, 42.0)
    np.testing.assert_array_equal(apply_clahe(gray), gray)


def test_tile_blending_values():
    # 2x2 tiles of 2x2 pixels; clip limit high enough that nothing is clipped,
    # so each mapping is (pixels in the tile <= v) * 255 / 4
    gray = np.array([
        [0, 100, 100, 200],
        [100, 200, 100, 200],
        [0, 0, 200, 200],
        [0, 100, 200, 200],
    ], dtype=np.float64)
    expected = np.array([
        # top-left tile blends all four neighbours
        [63.75, 0.5 * 191.25 + 0.5 * 63.75, 127.5, 255.0],
        # right column blends vertically with the tile below
        [0.5 * 191.25 + 0.5 * 255.0, 255.0, 0.5 * 127.5, 255.0],
        # bottom row blends horizontally with the tile to the right
        [191.25, 0.5 * 191.25, 255.0, 255.0],
        [191.25, 0.5 * 255.0, 255.0, 255.0],
    ])
    np.testing.assert_allclose(apply_clahe(gray, tile_size=2, clip_limit=256.0), expected)
