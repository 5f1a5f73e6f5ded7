# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
import base64
import datetime
import hmac
import logging
import uuid
import warnings
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from hashlib import sha1
from typing import Final, Self, TypedDict

from ._http import URI, AliyunRequest, percent_encode
from .exceptions import (
    AliyunSDKWarning,
    ConfigurationError,
    EncodingError,
    MissingDependencyError,
)
from .interfaces.identity import AliyunCredentialsIdentity

logger: Final = logging.getLogger(__name__)

SIGNATURE_TIMESTAMP_FORMAT: str = "%Y-%m-%dT%H:%M:%SZ"
SIGNATURE_METHOD: str = "HMAC-SHA1"
SIGNATURE_VERSION: str = "1.0"
SIGNATURE_PARAMETER: str = "Signature"
DEFAULT_API_VERSION: str = "2017-05-25"
DEFAULT_FORMAT: str = "JSON"
SUPPORTED_FORMATS: tuple[str, ...] = ("JSON", "XML")


class RPCSigningProperties(TypedDict, total=False):
    version: str
    format: str
    timestamp: str
    nonce: str


@dataclass(frozen=True)
class ParameterRelocation:
    """Moves the ``key`` parameter directly after the ``after`` parameter.

    Relocations run after the parameters are sorted, so every other parameter
    keeps its lexicographic position.
    """

    key: str
    after: str

    def __post_init__(self) -> None:
        if self.key == self.after:
            raise ConfigurationError(
                f"Can't relocate the {self.key} parameter after itself."
            )

    def apply(self, parameters: list[tuple[str, str]]) -> list[tuple[str, str]]:
        names = [name for name, _ in parameters]
        if self.key not in names:
            return parameters
        if self.after not in names:
            raise MissingDependencyError(
                f"The {self.key} parameter must be signed directly after "
                f"{self.after}, but {self.after} was not supplied."
            )

        moved = parameters[names.index(self.key)]
        remaining = [param for param in parameters if param[0] != self.key]
        position = [name for name, _ in remaining].index(self.after) + 1
        remaining.insert(position, moved)
        return remaining


DEFAULT_RELOCATIONS: tuple[ParameterRelocation, ...] = (
    ParameterRelocation(key="SignName", after="PhoneNumbers"),
)


@dataclass(frozen=True, kw_only=True)
class SigningContext:
    """Everything besides the request parameters that goes into a signature.

    The nonce and timestamp are fixed when the context is created, so a context
    must not be reused across requests.
    """

    method: str
    access_key_id: str
    access_key_secret: str = field(repr=False)
    nonce: str
    timestamp: str
    api_version: str = DEFAULT_API_VERSION
    format: str = DEFAULT_FORMAT
    security_token: str | None = field(default=None, repr=False)
    signature_method: str = SIGNATURE_METHOD
    signature_version: str = SIGNATURE_VERSION

    @classmethod
    def create(
        cls,
        *,
        method: str,
        identity: AliyunCredentialsIdentity,
        properties: RPCSigningProperties | None = None,
    ) -> Self:
        """Capture a new context, generating a nonce and timestamp unless the
        properties already provide them.

        :param method: The HTTP method of the request.
        :param identity: The credentials to sign with.
        :param properties: Optional overrides for the API version, format,
            timestamp and nonce.
        """
        # Create copy of signing properties to avoid mutating the original
        new_properties = RPCSigningProperties(**(properties or {}))
        if not method:
            raise ConfigurationError("An HTTP method is required for signing.")

        response_format = new_properties.get("format", DEFAULT_FORMAT).upper()
        if response_format not in SUPPORTED_FORMATS:
            raise ConfigurationError(
                f"Unsupported response format {response_format!r}. Expected one "
                f"of: {', '.join(SUPPORTED_FORMATS)}."
            )

        if "timestamp" in new_properties:
            _validate_timestamp(new_properties["timestamp"])
        else:
            date_obj = datetime.datetime.now(datetime.UTC)
            new_properties["timestamp"] = date_obj.strftime(SIGNATURE_TIMESTAMP_FORMAT)
        if "nonce" not in new_properties:
            new_properties["nonce"] = str(uuid.uuid4())

        return cls(
            method=method.upper(),
            access_key_id=identity.access_key_id,
            access_key_secret=identity.access_key_secret,
            nonce=new_properties["nonce"],
            timestamp=new_properties["timestamp"],
            api_version=new_properties.get("version", DEFAULT_API_VERSION),
            format=response_format,
            security_token=identity.security_token,
        )

    def signing_parameters(self) -> dict[str, str]:
        """The parameters every signed request must carry."""
        params = {
            "Format": self.format.upper(),
            "Version": self.api_version,
            "AccessKeyId": self.access_key_id,
            "SignatureVersion": self.signature_version,
            "SignatureMethod": self.signature_method,
            "SignatureNonce": self.nonce,
            "Timestamp": self.timestamp,
        }
        if self.security_token is not None:
            params["SecurityToken"] = self.security_token
        return params


@dataclass(frozen=True)
class CanonicalQuery:
    """The ordered parameters of a request, ready to be signed.

    ``parameters`` holds the raw names and values in signing order and ``pairs``
    holds the same entries percent-encoded.
    """

    parameters: tuple[tuple[str, str], ...]
    pairs: tuple[tuple[str, str], ...]

    def __str__(self) -> str:
        return "&".join(f"{name}={value}" for name, value in self.pairs)


class RPCSigner:
    """Request signer for Alibaba Cloud RPC APIs using HMAC-SHA1 signature version
    1.0."""

    def __init__(
        self, *, relocations: Sequence[ParameterRelocation] = DEFAULT_RELOCATIONS
    ) -> None:
        """Construct a signer.

        :param relocations: Ordering rules applied after the parameters are sorted.
            By default ``SignName`` is signed directly after ``PhoneNumbers``.
        """
        self._relocations = tuple(relocations)

    def sign(
        self,
        *,
        request: AliyunRequest,
        identity: AliyunCredentialsIdentity,
        properties: RPCSigningProperties | None = None,
    ) -> AliyunRequest:
        """Generate a signature and apply it to a copy of the supplied request.

        The returned request carries the signing parameters and ``Signature`` in
        addition to the original parameters.

        :param request: An AliyunRequest to sign prior to sending to the service.
        :param identity: A set of credentials to sign with.
        :param properties: RPCSigningProperties overriding the API version, format,
            timestamp or nonce.
        """
        self._validate_identity(identity=identity)
        context = SigningContext.create(
            method=request.method, identity=identity, properties=properties
        )
        if context.method != "GET":
            warnings.warn(
                f"Signing a {context.method} request. Parameters are still sent "
                "in the query string and any body is left unsigned.",
                AliyunSDKWarning,
            )

        canonical_query = self.canonicalize(
            parameters=request.parameters, context=context
        )
        string_to_sign = self.string_to_sign(
            method=context.method, canonical_query=str(canonical_query)
        )
        signature = self.signature(
            string_to_sign=string_to_sign, secret=context.access_key_secret
        )

        signed_parameters = dict(canonical_query.parameters)
        signed_parameters[SIGNATURE_PARAMETER] = signature
        return replace(request, method=context.method, parameters=signed_parameters)

    def presign_url(
        self,
        *,
        host: str,
        parameters: Mapping[str, str],
        identity: AliyunCredentialsIdentity,
        method: str = "GET",
        properties: RPCSigningProperties | None = None,
    ) -> str:
        """Sign the parameters and return the URL to send them to.

        :param host: The endpoint host, for example ``dysmsapi.aliyuncs.com``.
        :param parameters: The API parameters, such as ``Action``.
        :param identity: A set of credentials to sign with.
        :param method: The HTTP method the URL will be requested with.
        :param properties: RPCSigningProperties overriding the API version, format,
            timestamp or nonce.
        """
        request = AliyunRequest(
            destination=URI(host=host), method=method, parameters=parameters
        )
        signed_request = self.sign(
            request=request, identity=identity, properties=properties
        )
        return signed_request.url

    def canonicalize(
        self, *, parameters: Mapping[str, str], context: SigningContext
    ) -> CanonicalQuery:
        """Merge the signing parameters into a copy of ``parameters`` and put them
        in signing order.

        Parameters are sorted by name in ordinal order, then each relocation rule
        is applied. The caller's mapping is not modified.

        ``SecurityToken`` is only reserved when the identity carries a token.
        Otherwise a caller-supplied ``SecurityToken`` is signed like any other
        parameter.

        :param parameters: The request parameters supplied by the caller.
        :param context: The SigningContext providing the signing parameters.
        :raises ConfigurationError: If a caller parameter uses a reserved name.
        :raises MissingDependencyError: If a relocated parameter is present without
            the parameter it must follow.
        :raises EncodingError: If a name or value isn't valid UTF-8 text.
        """
        merged = self._normalize_parameters(parameters=parameters)
        signing_parameters = context.signing_parameters()
        reserved = [SIGNATURE_PARAMETER, *signing_parameters]
        collisions = [name for name in reserved if name in merged]
        if collisions:
            raise ConfigurationError(
                "The following parameters are reserved for signing and can't be "
                f"supplied with the request: {', '.join(collisions)}."
            )
        merged.update(signing_parameters)

        ordered = sorted(merged.items())
        for relocation in self._relocations:
            ordered = relocation.apply(ordered)

        canonical_query = CanonicalQuery(
            parameters=tuple(ordered),
            pairs=tuple(
                (percent_encode(name), percent_encode(value)) for name, value in ordered
            ),
        )
        logger.debug("Canonical query string: %s", canonical_query)
        return canonical_query

    def string_to_sign(self, *, method: str, canonical_query: str) -> str:
        """The string to sign combines the HTTP method, the root path and the
        canonical query string::

            <HTTPMethod>&%2F&<PercentEncoded(CanonicalQueryString)>

        :param method: The HTTP method of the request.
        :param canonical_query: String generated from the ``canonicalize`` method.
        :raises ConfigurationError: If ``method`` is empty.
        """
        if not method:
            raise ConfigurationError(
                "Cannot generate string_to_sign without an HTTP method. "
                f"Current value: {method!r}"
            )
        string_to_sign = (
            f"{method.upper()}&{percent_encode('/')}&{percent_encode(canonical_query)}"
        )
        logger.debug("String to sign: %s", string_to_sign)
        return string_to_sign

    def signature(self, *, string_to_sign: str, secret: str) -> str:
        """Sign the string to sign.

        The HMAC-SHA1 key is the AccessKey secret followed by ``&``, and the digest
        is returned base64 encoded.
        """
        key = self._encode(f"{secret}&", name="AccessKey secret")
        msg = self._encode(string_to_sign, name="string to sign")
        digest = hmac.new(key=key, msg=msg, digestmod=sha1).digest()
        return base64.b64encode(digest).decode("ascii")

    def _encode(self, value: str, *, name: str) -> bytes:
        try:
            return value.encode("utf-8")
        except UnicodeEncodeError as e:
            raise EncodingError(f"The {name} is not valid UTF-8 text: {e}") from e

    def _normalize_parameters(
        self, *, parameters: Mapping[str, str | bytes]
    ) -> dict[str, str]:
        normalized: dict[str, str] = {}
        for name, value in parameters.items():
            normalized[self._to_text(name)] = self._to_text(value)
        return normalized

    def _to_text(self, value: str | bytes) -> str:
        if isinstance(value, bytes):
            try:
                return value.decode("utf-8")
            except UnicodeDecodeError as e:
                raise EncodingError(
                    f"Parameter {value!r} is not valid UTF-8 text: {e}"
                ) from e
        if not isinstance(value, str):  # pyright: ignore[reportUnnecessaryIsInstance]
            raise EncodingError(
                f"Expected parameter of type str but received {type(value)}."
            )
        self._encode(value, name=f"parameter {value!r}")
        return value

    def _validate_identity(self, *, identity: AliyunCredentialsIdentity) -> None:
        """Perform runtime and expiration checks before attempting signing."""
        if not isinstance(identity, AliyunCredentialsIdentity):  # pyright: ignore
            raise ValueError(
                "Received unexpected value for identity parameter. Expected "
                f"AliyunCredentialIdentity but received {type(identity)}."
            )
        elif identity.is_expired:
            raise ValueError(
                f"Provided identity expired at {identity.expiration}. Please "
                "refresh the credentials or update the expiration parameter."
            )


def _validate_timestamp(timestamp: str) -> None:
    """Ensure a supplied timestamp is a UTC time in ``YYYY-MM-DDThh:mm:ssZ`` form."""
    try:
        parsed = datetime.datetime.strptime(timestamp, SIGNATURE_TIMESTAMP_FORMAT)
    except ValueError as e:
        raise ConfigurationError(
            f"Invalid timestamp {timestamp!r}. Expected a UTC time in the form "
            "YYYY-MM-DDThh:mm:ssZ."
        ) from e
    # strptime accepts fields without zero padding.
    if parsed.strftime(SIGNATURE_TIMESTAMP_FORMAT) != timestamp:
        raise ConfigurationError(
            f"Invalid timestamp {timestamp!r}. Expected a UTC time in the form "
            "YYYY-MM-DDThh:mm:ssZ."
        )
