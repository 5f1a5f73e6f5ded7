# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""Aliyun RPC Signers provides stand-alone signing for Alibaba Cloud query-string
APIs, such as SMS, for use with HTTP tools like AioHTTP, Curl, Requests, etc."""

from __future__ import annotations

from ._http import URI, AliyunRequest, build_query, percent_encode
from ._identity import AliyunCredentialIdentity
from .credentials import (
    ChainedCredentialsResolver,
    EnvironmentCredentialsResolver,
    StaticCredentialsResolver,
)
from .signers import (
    CanonicalQuery,
    ParameterRelocation,
    RPCSigner,
    RPCSigningProperties,
    SigningContext,
)

__license__ = "Apache-2.0"
__version__ = "0.1.0"

__all__ = (
    "URI",
    "AliyunCredentialIdentity",
    "AliyunRequest",
    "CanonicalQuery",
    "ChainedCredentialsResolver",
    "EnvironmentCredentialsResolver",
    "ParameterRelocation",
    "RPCSigner",
    "RPCSigningProperties",
    "SigningContext",
    "StaticCredentialsResolver",
    "build_query",
    "percent_encode",
)
