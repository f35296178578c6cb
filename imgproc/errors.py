"""Exception types raised by the imgproc kernels."""


class ShapeError(ValueError):
    """A buffer does not have the shape an operation requires.

    Raised before any output is written, so a failed call leaves caller
    buffers untouched.
    """
