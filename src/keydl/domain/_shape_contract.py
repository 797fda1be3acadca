"""
Shape contracts for KeyDL layers.

This module contains the pure, side-effect-free shape arithmetic used by every
layer kind: given an input shape and a layer's hyperparameters, compute the
output shape, and validate that cropping / kernel / stride specifications are
consistent with the input rank and extents.

Conventions
-----------
- Shapes are channels-last: (N, L, C), (N, H, W, C) or (N, D, H, W, C).
- The batch axis (index 0) is usually `UNKNOWN_DIM` and always passes through.
- Any configuration that would yield a non-positive output extent is rejected
  with `ConfigurationError` here, at shape-computation time, instead of being
  deferred to graph execution.

Notes
-----
This module contains no NumPy or engine-specific logic and is safe to depend
on from any layer of the architecture.
"""

from __future__ import annotations

import math
from typing import Sequence, Tuple

from ._errors import ConfigurationError, UnsupportedFeatureError
from ._padding import ConvPadding
from ._shape import Shape, UNKNOWN_DIM, is_known, make_shape

CroppingSpec = Tuple[Tuple[int, int], ...]


def _is_int(v) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def normalize_spatial(value, rank: int, name: str) -> Tuple[int, ...]:
    """
    Normalize a kernel/stride/pool-size specification to `rank` positive ints.

    Accepted forms
    --------------
    - a single int, repeated for every spatial axis: `2 -> (2, 2)`
    - a sequence of exactly `rank` ints: `(5, 5)`
    - a sequence of `rank + 2` ints with unit batch and channel entries, as
      used by NHWC engine ops: `(1, 2, 2, 1) -> (2, 2)`

    Parameters
    ----------
    value : int or Sequence[int]
        User-provided specification.
    rank : int
        Number of spatial axes of the layer.
    name : str
        Parameter name used in error messages (e.g. "strides").

    Returns
    -------
    tuple[int, ...]
        Normalized per-axis values.

    Raises
    ------
    ConfigurationError
        If the length does not match the rank, the batch/channel entries of
        the extended form are not 1, or any entry is not a positive int.
    """
    if _is_int(value):
        values: Tuple[int, ...] = (value,) * rank
    else:
        try:
            seq = tuple(value)
        except TypeError as e:
            raise ConfigurationError(
                f"{name} should be an int or a sequence of ints, got {value!r}."
            ) from e
        if len(seq) == rank:
            values = seq
        elif len(seq) == rank + 2:
            if seq[0] != 1 or seq[-1] != 1:
                raise ConfigurationError(
                    f"{name} of length {rank + 2} must have 1 in the batch and "
                    f"channel positions, got {seq}."
                )
            values = seq[1:-1]
        else:
            raise ConfigurationError(
                f"{name} should have {rank} (or {rank + 2}) elements, got {len(seq)}."
            )

    for v in values:
        if not _is_int(v) or v <= 0:
            raise ConfigurationError(
                f"All elements of {name} should be positive integers, got {values}."
            )
    return tuple(int(v) for v in values)


def validate_cropping(cropping, spatial_rank: int) -> CroppingSpec:
    """
    Validate a cropping specification and normalize it to a tuple of pairs.

    A cropping specification holds one `(left, right)` pair per spatial axis:
    the number of elements removed from the beginning and the end of that
    axis. For 1D cropping a flat `(left, right)` pair is also accepted.

    Parameters
    ----------
    cropping : Sequence
        Cropping specification.
    spatial_rank : int
        Expected number of spatial axes (1, 2 or 3).

    Returns
    -------
    tuple[tuple[int, int], ...]
        `spatial_rank` validated pairs.

    Raises
    ------
    ConfigurationError
        If the number of pairs differs from `spatial_rank`, any pair does not
        hold exactly two elements, or any element is not a non-negative int.
    """
    try:
        spec = list(cropping)
    except TypeError as e:
        raise ConfigurationError(
            f"The cropping should be an array of size {spatial_rank}, got {cropping!r}."
        ) from e

    if spatial_rank == 1 and len(spec) == 2 and all(_is_int(v) for v in spec):
        spec = [spec]

    if len(spec) != spatial_rank:
        raise ConfigurationError(
            f"The cropping should be an array of size {spatial_rank}."
        )

    pairs = []
    for pair in spec:
        try:
            items = tuple(pair)
        except TypeError as e:
            raise ConfigurationError(
                "All elements of cropping should be arrays of size 2."
            ) from e
        if len(items) != 2:
            raise ConfigurationError(
                "All elements of cropping should be arrays of size 2."
            )
        for v in items:
            if not _is_int(v) or v < 0:
                raise ConfigurationError(
                    f"Cropping amounts should be non-negative integers, got {items}."
                )
        pairs.append((int(items[0]), int(items[1])))
    return tuple(pairs)


def check_rank(input_shape: Sequence[int], rank: int, layer: str) -> Shape:
    """
    Ensure `input_shape` has exactly `rank` axes.

    Raises
    ------
    ConfigurationError
        If the rank differs.
    """
    shape = make_shape(input_shape)
    if len(shape) != rank:
        raise ConfigurationError(
            f"{layer} expects an input of rank {rank}, got shape {shape}."
        )
    return shape


def cropping_output_shape(input_shape: Sequence[int], cropping: CroppingSpec) -> Shape:
    """
    Compute the output shape of a cropping layer.

    Each spatial axis `i` becomes `extent - left_i - right_i`; the batch and
    channel axes pass through unchanged. Unknown spatial extents stay unknown.

    Raises
    ------
    ConfigurationError
        If the input rank does not match the cropping rank, or a crop would
        leave a non-positive extent.
    """
    spatial_rank = len(cropping)
    shape = check_rank(input_shape, spatial_rank + 2, f"Cropping{spatial_rank}D")

    out = [shape[0]]
    for axis, (left, right) in enumerate(cropping, start=1):
        extent = shape[axis]
        if not is_known(extent):
            out.append(UNKNOWN_DIM)
            continue
        cropped = extent - left - right
        if cropped <= 0:
            raise ConfigurationError(
                f"Cropping ({left}, {right}) on axis {axis} of extent {extent} "
                f"leaves a non-positive extent ({cropped})."
            )
        out.append(cropped)
    out.append(shape[-1])
    return tuple(out)


def check_padding_supported(padding: ConvPadding) -> ConvPadding:
    """
    Reject padding modes that are declared but not implemented.

    Raises
    ------
    UnsupportedFeatureError
        For `ConvPadding.FULL`.
    ConfigurationError
        If `padding` is not a `ConvPadding` member.
    """
    if not isinstance(padding, ConvPadding):
        raise ConfigurationError(f"padding should be a ConvPadding, got {padding!r}.")
    if padding is ConvPadding.FULL:
        raise UnsupportedFeatureError("FULL padding")
    return padding


def conv_output_length(
    length: int, kernel: int, stride: int, padding: ConvPadding
) -> int:
    """
    Compute the output extent of one spatial axis of a convolution or pooling.

    SAME  -> ceil(length / stride)
    VALID -> ceil((length - kernel + 1) / stride)

    Unknown input extents produce unknown output extents.

    Raises
    ------
    UnsupportedFeatureError
        For FULL padding.
    ConfigurationError
        If the window does not fit (VALID) or the result is non-positive.
    """
    check_padding_supported(padding)
    if not is_known(length):
        return UNKNOWN_DIM

    if padding is ConvPadding.SAME:
        out = math.ceil(length / stride)
    else:
        span = length - kernel + 1
        if span <= 0:
            raise ConfigurationError(
                f"Kernel {kernel} does not fit into an axis of extent {length} "
                "with VALID padding."
            )
        out = math.ceil(span / stride)

    if out <= 0:
        raise ConfigurationError(
            f"Axis of extent {length} with kernel {kernel} and stride {stride} "
            f"produces a non-positive output extent ({out})."
        )
    return out


def same_padding_amounts(length: int, kernel: int, stride: int) -> Tuple[int, int]:
    """
    Return the (before, after) zero padding SAME mode applies to one axis.

    The total is `max((out - 1) * stride + kernel - length, 0)`, split with
    the extra element at the end.
    """
    out = math.ceil(length / stride)
    total = max((out - 1) * stride + kernel - length, 0)
    return total // 2, total - total // 2


def conv2d_output_shape(
    input_shape: Sequence[int],
    kernel_size: Tuple[int, int],
    strides: Tuple[int, int],
    padding: ConvPadding,
    filters: int,
) -> Shape:
    """
    Output shape of a 2D convolution over an NHWC input.
    """
    shape = check_rank(input_shape, 4, "Conv2D")
    h = conv_output_length(shape[1], kernel_size[0], strides[0], padding)
    w = conv_output_length(shape[2], kernel_size[1], strides[1], padding)
    return (shape[0], h, w, int(filters))


def depthwise_conv2d_output_shape(
    input_shape: Sequence[int],
    kernel_size: Tuple[int, int],
    strides: Tuple[int, int],
    padding: ConvPadding,
    depth_multiplier: int,
) -> Shape:
    """
    Output shape of a depthwise 2D convolution over an NHWC input.

    Every input channel produces `depth_multiplier` output channels.
    """
    shape = check_rank(input_shape, 4, "DepthwiseConv2D")
    if not is_known(shape[3]):
        raise ConfigurationError("DepthwiseConv2D requires a known channel axis.")
    h = conv_output_length(shape[1], kernel_size[0], strides[0], padding)
    w = conv_output_length(shape[2], kernel_size[1], strides[1], padding)
    return (shape[0], h, w, shape[3] * int(depth_multiplier))


def pool2d_output_shape(
    input_shape: Sequence[int],
    pool_size: Tuple[int, int],
    strides: Tuple[int, int],
    padding: ConvPadding,
) -> Shape:
    """
    Output shape of a 2D pooling window over an NHWC input.
    """
    shape = check_rank(input_shape, 4, "Pool2D")
    h = conv_output_length(shape[1], pool_size[0], strides[0], padding)
    w = conv_output_length(shape[2], pool_size[1], strides[1], padding)
    return (shape[0], h, w, shape[3])


def flatten_output_shape(input_shape: Sequence[int]) -> Shape:
    """
    Output shape of a flatten layer: a single axis holding the product of all
    non-batch extents.

    Raises
    ------
    ConfigurationError
        If the input has no non-batch axes or any of them is unknown.
    """
    shape = make_shape(input_shape)
    if len(shape) < 2:
        raise ConfigurationError(
            f"Flatten expects an input with at least one non-batch axis, got {shape}."
        )
    features = 1
    for d in shape[1:]:
        if not is_known(d):
            raise ConfigurationError(f"Flatten requires known non-batch extents, got {shape}.")
        features *= d
    return (features,)


def dense_output_shape(input_shape: Sequence[int], units: int) -> Shape:
    """
    Output shape of a dense layer: the last axis is replaced by `units`.

    Raises
    ------
    ConfigurationError
        If the input is a scalar shape or its last axis is unknown.
    """
    shape = make_shape(input_shape)
    if len(shape) < 1 or not is_known(shape[-1]):
        raise ConfigurationError(
            f"Dense requires a known feature axis, got input shape {shape}."
        )
    return shape[:-1] + (int(units),)
