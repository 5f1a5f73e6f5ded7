# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
import logging
import os
from collections.abc import Sequence
from typing import Final

from ._identity import AliyunCredentialIdentity
from .exceptions import IdentityResolutionError
from .interfaces.identity import AliyunCredentialsIdentity, CredentialsResolver

logger: Final = logging.getLogger(__name__)

ACCESS_KEY_ID_ENV_VAR: Final = "ALIBABA_CLOUD_ACCESS_KEY_ID"
ACCESS_KEY_SECRET_ENV_VAR: Final = "ALIBABA_CLOUD_ACCESS_KEY_SECRET"
SECURITY_TOKEN_ENV_VAR: Final = "ALIBABA_CLOUD_SECURITY_TOKEN"


class StaticCredentialsResolver:
    """Resolve static Alibaba Cloud credentials."""

    def __init__(self, *, credentials: AliyunCredentialIdentity) -> None:
        self._credentials = credentials

    def get_identity(self) -> AliyunCredentialIdentity:
        return self._credentials


class EnvironmentCredentialsResolver:
    """Resolves Alibaba Cloud credentials from system environment variables."""

    def __init__(self) -> None:
        self._credentials: AliyunCredentialIdentity | None = None

    def get_identity(self) -> AliyunCredentialIdentity:
        if self._credentials is not None:
            return self._credentials

        access_key_id = os.getenv(ACCESS_KEY_ID_ENV_VAR)
        access_key_secret = os.getenv(ACCESS_KEY_SECRET_ENV_VAR)
        security_token = os.getenv(SECURITY_TOKEN_ENV_VAR)

        if not access_key_id or not access_key_secret:
            raise IdentityResolutionError(
                f"{ACCESS_KEY_ID_ENV_VAR} and {ACCESS_KEY_SECRET_ENV_VAR} are required"
            )

        self._credentials = AliyunCredentialIdentity(
            access_key_id=access_key_id,
            access_key_secret=access_key_secret,
            security_token=security_token or None,
        )
        logger.debug(
            "Resolved credentials for %s from the environment.", access_key_id
        )
        return self._credentials


class ChainedCredentialsResolver:
    """Attempts to resolve credentials by checking a sequence of sub-resolvers.

    If a nested resolver raises a :py:class:`IdentityResolutionError`, the next
    resolver in the chain will be attempted.
    """

    def __init__(self, resolvers: Sequence[CredentialsResolver]) -> None:
        """Construct a ChainedCredentialsResolver.

        :param resolvers: The sequence of resolvers to resolve credentials from.
        """
        self._resolvers = resolvers

    def get_identity(self) -> AliyunCredentialsIdentity:
        logger.debug("Attempting to resolve credentials from resolver chain.")
        for resolver in self._resolvers:
            try:
                logger.debug(
                    "Attempting to resolve credentials from %s.", type(resolver)
                )
                return resolver.get_identity()
            except IdentityResolutionError as e:
                logger.debug(
                    "Failed to resolve credentials from %s: %s", type(resolver), e
                )

        raise IdentityResolutionError(
            "Failed to resolve credentials from resolver chain."
        )
