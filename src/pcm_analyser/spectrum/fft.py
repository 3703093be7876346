"""Forward FFT over split real/imaginary buffers."""

import numpy as np
from scipy import fft as sp_fft


def forward_transform(real: np.ndarray, imag: np.ndarray) -> None:
    """In-place size-N forward complex FFT.

    Args:
        real: Real parts, shape (N,), overwritten with Re(X).
        imag: Imaginary parts, shape (N,), overwritten with Im(X).
    """
    if real.shape != imag.shape:
        raise ValueError(f"real/imag shape mismatch: {real.shape} vs {imag.shape}")
    out = sp_fft.fft(real + 1j * imag)
    real[:] = out.real
    imag[:] = out.imag
