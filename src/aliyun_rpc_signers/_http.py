# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""
NOTE TO THE READER:

This file is _strictly_ temporary and subject to abrupt breaking changes
including unannounced removal. For typing information, please rely on the
__all__ attributes provided in the package __init__.py file.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from functools import cached_property
from urllib.parse import quote, urlunparse

from .exceptions import EncodingError


def percent_encode(value: str) -> str:
    """Percent-encode a string for Alibaba Cloud RPC signing.

    Only the RFC 3986 unreserved characters (``A-Z a-z 0-9 - _ . ~``) are left as
    is. Everything else is encoded from its UTF-8 bytes with upper-case hex digits,
    so a space becomes ``%20``, ``*`` becomes ``%2A`` and ``/`` becomes ``%2F``.

    :param value: The text to encode.
    :raises EncodingError: If ``value`` can't be represented as UTF-8.
    """
    try:
        return quote(string=value, safe="")
    except UnicodeEncodeError as e:
        raise EncodingError(
            f"Unable to percent-encode {value!r}, it is not valid UTF-8 text: {e}"
        ) from e


def build_query(pairs: Iterable[tuple[str, str]]) -> str:
    """Join name-value pairs into a query string, encoding both names and values."""
    return "&".join(
        f"{percent_encode(name)}={percent_encode(value)}" for name, value in pairs
    )


@dataclass(kw_only=True, frozen=True)
class URI:
    """Universal Resource Identifier, target location for an
    :py:class:`AliyunRequest`."""

    scheme: str = "https"
    """For example ``http`` or ``https``."""

    host: str
    """The hostname, for example ``dysmsapi.aliyuncs.com``."""

    port: int | None = None
    """An explicit port number."""

    path: str | None = None
    """Path component of the URI."""

    query: str | None = None
    """Query component of the URI as string."""

    @property
    def netloc(self) -> str:
        """Construct netloc string in format ``{host}:{port}``.

        ``port`` is only included if set.
        """
        return self._netloc

    # cached_property does NOT behave like property, it actually allows for setting.
    # Therefore we need a layer of indirection.
    @cached_property
    def _netloc(self) -> str:
        if self.port is not None:
            return f"{self.host}:{self.port}"
        return self.host

    def build(self) -> str:
        """Construct URI string representation.

        Returns a string of the form ``{scheme}://{host}:{port}{path}?{query}``
        """
        components = (
            self.scheme,
            self.netloc,
            self.path or "",
            "",  # params
            self.query,
            "",  # fragment
        )
        return urlunparse(components)


@dataclass(kw_only=True, frozen=True)
class AliyunRequest:
    """A query-string request to an Alibaba Cloud RPC endpoint.

    All request data lives in ``parameters``, so the request has no body. Requests
    are immutable; signing produces a new request.
    """

    destination: URI
    method: str = "GET"
    parameters: Mapping[str, str] = field(default_factory=dict)

    @property
    def url(self) -> str:
        """The fully qualified URL carrying every parameter in order.

        Unsigned requests produce a URL too, but the service will reject it.
        """
        query = build_query(self.parameters.items())
        return replace(self.destination, path="/", query=query).build()

