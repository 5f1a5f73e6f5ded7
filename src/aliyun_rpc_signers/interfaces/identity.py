# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from datetime import UTC, datetime
from typing import Protocol, runtime_checkable


@runtime_checkable
class Identity(Protocol):
    """An entity available to the client representing who the user is."""

    expiration: datetime | None = None
    """The expiration time of the identity.

    If time zone is provided, it is updated to UTC. The value must always be in UTC.
    """

    @property
    def is_expired(self) -> bool:
        """Whether the identity is expired."""
        if self.expiration is None:
            return False
        return datetime.now(tz=UTC) >= self.expiration


@runtime_checkable
class AliyunCredentialsIdentity(Identity, Protocol):
    """Alibaba Cloud AccessKey Identity."""

    access_key_id: str
    """The AccessKey ID issued to a RAM user or role."""

    access_key_secret: str
    """The secret paired with the AccessKey ID, used only as HMAC key material."""

    security_token: str | None = None
    """A temporary STS token, sent as the ``SecurityToken`` parameter when set."""


@runtime_checkable
class CredentialsResolver(Protocol):
    """Used to load credentials from a configured source."""

    def get_identity(self) -> AliyunCredentialsIdentity:
        """Load credentials.

        :raises IdentityResolutionError: If the source has no credentials to offer.
        """
        ...
