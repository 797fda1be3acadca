"""
Model- and layer-related exceptions for KeyDL.

This module defines the custom errors raised while configuring layers,
assembling them into models, and driving the compile/inference lifecycle.

All of them are local and synchronous: they are raised immediately at the
point where an invalid configuration or an invalid lifecycle transition is
detected, and they carry a human-readable message naming the offending layer
or parameter.
"""


class ConfigurationError(ValueError):
    """
    Raised when layer or model hyperparameters are malformed.

    Typical triggers are cropping arrays of the wrong size, kernel/stride
    tuples whose length does not match the spatial rank, input shapes of the
    wrong rank, and shape computations that would produce non-positive
    extents.
    """


class DuplicateLayerNameError(ValueError):
    """
    Raised when two layers of the same model resolve to the same name.

    Attributes
    ----------
    layer_name : str
        The first name found to be used more than once.
    """

    def __init__(self, layer_name: str) -> None:
        """
        Initialize the DuplicateLayerNameError.

        Parameters
        ----------
        layer_name : str
            The repeated layer name.
        """
        super().__init__(
            f"The layer name {layer_name} is used in previous layers. "
            "The layer name should be unique."
        )
        self.layer_name = layer_name


class UninitializedModelError(RuntimeError):
    """
    Raised when shape, parameter or inference queries are made before the
    owning model has been compiled (or before a layer's variables exist).
    """


class UnsupportedFeatureError(NotImplementedError):
    """
    Raised for declared-but-unimplemented variants.

    Examples are the FULL convolution padding mode and ReLU with a non-zero
    negative slope (LeakyReLU).
    """

    def __init__(self, feature: str) -> None:
        super().__init__(f"{feature} is not supported in KeyDL yet.")
        self.feature = feature


class DoubleCompileError(RuntimeError):
    """
    Raised when an already compiled model (or an already built layer) is
    compiled again.

    Variable allocation is not idempotent against the engine, so the second
    call is rejected instead of silently ignored.
    """


class ModelDisposedError(RuntimeError):
    """
    Raised when a model is used after its session has been released.
    """
