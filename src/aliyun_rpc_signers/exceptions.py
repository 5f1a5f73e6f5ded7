# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0


class AliyunSDKWarning(UserWarning): ...


class BaseAliyunSDKException(Exception):
    """Top-level exception to capture SDK-related errors."""


class ConfigurationError(BaseAliyunSDKException, ValueError):
    """The request parameters or signing properties can't be combined for signing.

    Raised when a caller-supplied parameter collides with a reserved signing
    parameter, or when a signing property has an unsupported value.
    """


class EncodingError(BaseAliyunSDKException, ValueError):
    """A parameter name or value can't be represented as UTF-8 text."""


class MissingDependencyError(BaseAliyunSDKException, ValueError):
    """A parameter that must be placed after another was supplied without it."""


class IdentityResolutionError(BaseAliyunSDKException):
    """Credentials could not be resolved from the configured source."""
