"""
Padding modes for convolution and pooling layers.
"""

from enum import Enum


class ConvPadding(Enum):
    """
    Policy governing how spatial output extents are derived from kernel
    size and stride.

    Attributes
    ----------
    SAME : ConvPadding
        Output extent is `ceil(input / stride)`; the input is zero-padded
        as evenly as possible, with the extra element at the end.
    VALID : ConvPadding
        No padding; output extent is `ceil((input - kernel + 1) / stride)`.
    FULL : ConvPadding
        Declared for API compatibility but not implemented. Any layer or
        shape computation that receives it raises `UnsupportedFeatureError`.
    """

    SAME = "same"
    VALID = "valid"
    FULL = "full"
