import numpy as np
import pytest

from ascii_motion.kernels import (
    apply_sobel_2d,
    clamp,
    convolve_2d,
    gaussian_kernel_2d,
    gaussian_kernel_size,
    round_half_up,
)


@pytest.mark.parametrize("value, expected", [
    (0.5, 1), (1.5, 2), (2.5, 3), (-0.5, 0), (-1.5, -1), (0.49, 0), (7.0, 7),
])
def test_round_half_up_scalar(value, expected):
    assert round_half_up(value) == expected


def test_round_half_up_array():
    result = round_half_up(np.array([0.5, 2.5, 3.4999]))
    assert result.tolist() == [1, 3, 3]
    assert result.dtype == np.int64


def test_clamp_scalar_and_array():
    assert clamp(-3) == 0
    assert clamp(300) == 255
    assert clamp(12.5) == 12.5
    assert clamp(np.array([-1.0, 5.0, 999.0])).tolist() == [0.0, 5.0, 255.0]


@pytest.mark.parametrize("sigma, size", [(0.1, 3), (0.5, 3), (1.0, 6), (1.4, 9), (2.0, 12)])
def test_gaussian_kernel_size(sigma, size):
    assert gaussian_kernel_size(sigma) == size


def test_gaussian_kernel_is_normalized_and_symmetric():
    kernel = gaussian_kernel_2d(1.0, 6)
    assert kernel.shape == (7, 7)
    assert kernel.sum() == pytest.approx(1.0)
    np.testing.assert_allclose(kernel, kernel.T)
    np.testing.assert_allclose(kernel, kernel[::-1, ::-1])
    assert kernel[3, 3] == kernel.max()


def test_convolve_keeps_flat_field_flat():
    field = np.full((8, 9), 100.0)
    out = convolve_2d(field, gaussian_kernel_2d(1.0, 6))
    np.testing.assert_allclose(out, 100.0)


def test_convolve_constant_mode_darkens_border():
    field = np.full((8, 8), 100.0)
    out = convolve_2d(field, gaussian_kernel_2d(1.0, 6), mode='constant')
    assert out[0, 0] < 100.0
    assert out[4, 4] == pytest.approx(100.0, abs=1.0)


def test_convolve_empty_field():
    assert convolve_2d(np.zeros((0, 5)), gaussian_kernel_2d(1.0, 3)).shape == (0, 5)


def test_sobel_vertical_step():
    img = np.zeros((5, 6))
    img[:, 3:] = 255
    magnitude, angle = apply_sobel_2d(img)

    assert magnitude[2, 2] == pytest.approx(1020.0)
    assert magnitude[2, 3] == pytest.approx(1020.0)
    assert magnitude[2, 1] == 0.0
    assert angle[2, 2] == pytest.approx(0.0)


def test_sobel_horizontal_step_angle():
    img = np.zeros((6, 5))
    img[3:, :] = 255
    magnitude, angle = apply_sobel_2d(img)
    assert magnitude[2, 2] == pytest.approx(1020.0)
    assert angle[2, 2] == pytest.approx(90.0)


def test_sobel_negative_angle_is_folded():
    img = np.zeros((5, 6))
    img[:, :3] = 255          # bright on the left: gradient points to -x
    _, angle = apply_sobel_2d(img)
    assert 0.0 <= angle[2, 2] <= 180.0
    assert angle[2, 2] == pytest.approx(180.0)


def test_sobel_border_is_zero():
    rng = np.random.default_rng(0)
    magnitude, angle = apply_sobel_2d(rng.uniform(0, 255, (7, 7)))
    for arr in (magnitude, angle):
        assert not arr[0].any() and not arr[-1].any()
        assert not arr[:, 0].any() and not arr[:, -1].any()


def test_sobel_tiny_field():
    magnitude, angle = apply_sobel_2d(np.ones((2, 2)))
    assert magnitude.shape == (2, 2)
    assert not magnitude.any()
