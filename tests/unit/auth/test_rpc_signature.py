from dataclasses import dataclass

import pytest
from aliyun_rpc_signers import (
    URI,
    AliyunCredentialIdentity,
    AliyunRequest,
    RPCSigner,
    RPCSigningProperties,
    SigningContext,
)
from freezegun import freeze_time

SMS_HOST: str = "dysmsapi.aliyuncs.com"


@dataclass(kw_only=True)
class SignatureTestCase:
    name: str
    parameters: dict[str, str]
    identity: AliyunCredentialIdentity
    properties: RPCSigningProperties
    canonical_query: str
    string_to_sign: str
    signature: str
    method: str = "GET"


SEND_SMS = SignatureTestCase(
    name="send-sms",
    parameters={
        "PhoneNumbers": "13800138000",
        "SignName": "TestSign",
        "TemplateCode": "SMS_001",
        "TemplateParam": '{"code":"1234"}',
        "Action": "SendSms",
    },
    identity=AliyunCredentialIdentity(
        access_key_id="testkey", access_key_secret="testsecret"
    ),
    properties=RPCSigningProperties(
        timestamp="2024-01-01T00:00:00Z", nonce="fixed-nonce"
    ),
    canonical_query=(
        "AccessKeyId=testkey"
        "&Action=SendSms"
        "&Format=JSON"
        "&PhoneNumbers=13800138000"
        "&SignName=TestSign"
        "&SignatureMethod=HMAC-SHA1"
        "&SignatureNonce=fixed-nonce"
        "&SignatureVersion=1.0"
        "&TemplateCode=SMS_001"
        "&TemplateParam=%7B%22code%22%3A%221234%22%7D"
        "&Timestamp=2024-01-01T00%3A00%3A00Z"
        "&Version=2017-05-25"
    ),
    string_to_sign=(
        "GET&%2F&"
        "AccessKeyId%3Dtestkey"
        "%26Action%3DSendSms"
        "%26Format%3DJSON"
        "%26PhoneNumbers%3D13800138000"
        "%26SignName%3DTestSign"
        "%26SignatureMethod%3DHMAC-SHA1"
        "%26SignatureNonce%3Dfixed-nonce"
        "%26SignatureVersion%3D1.0"
        "%26TemplateCode%3DSMS_001"
        "%26TemplateParam%3D%257B%2522code%2522%253A%25221234%2522%257D"
        "%26Timestamp%3D2024-01-01T00%253A00%253A00Z"
        "%26Version%3D2017-05-25"
    ),
    signature="36nkKXxn+rLfnpsHmKPAN8S1k0I=",
)

# Published example for the ECS DescribeRegions action.
DESCRIBE_REGIONS = SignatureTestCase(
    name="describe-regions",
    parameters={"Action": "DescribeRegions"},
    identity=AliyunCredentialIdentity(
        access_key_id="testid", access_key_secret="testsecret"
    ),
    properties=RPCSigningProperties(
        version="2014-05-26",
        format="XML",
        timestamp="2016-02-23T12:46:24Z",
        nonce="3ee8c1b8-83d3-44af-a94f-4e0ad82fd6cf",
    ),
    canonical_query=(
        "AccessKeyId=testid"
        "&Action=DescribeRegions"
        "&Format=XML"
        "&SignatureMethod=HMAC-SHA1"
        "&SignatureNonce=3ee8c1b8-83d3-44af-a94f-4e0ad82fd6cf"
        "&SignatureVersion=1.0"
        "&Timestamp=2016-02-23T12%3A46%3A24Z"
        "&Version=2014-05-26"
    ),
    string_to_sign=(
        "GET&%2F&"
        "AccessKeyId%3Dtestid"
        "%26Action%3DDescribeRegions"
        "%26Format%3DXML"
        "%26SignatureMethod%3DHMAC-SHA1"
        "%26SignatureNonce%3D3ee8c1b8-83d3-44af-a94f-4e0ad82fd6cf"
        "%26SignatureVersion%3D1.0"
        "%26Timestamp%3D2016-02-23T12%253A46%253A24Z"
        "%26Version%3D2014-05-26"
    ),
    signature="OLeaidS1JvxuMvnyHOwuJ+uX5qY=",
)

TEST_CASES = [SEND_SMS, DESCRIBE_REGIONS]


@pytest.mark.parametrize("test_case", TEST_CASES, ids=lambda case: case.name)
def test_signature_version_1(test_case: SignatureTestCase) -> None:
    signer = RPCSigner()
    context = SigningContext.create(
        method=test_case.method,
        identity=test_case.identity,
        properties=test_case.properties,
    )

    canonical_query = signer.canonicalize(
        parameters=test_case.parameters, context=context
    )
    assert str(canonical_query) == test_case.canonical_query
    actual_string_to_sign = signer.string_to_sign(
        method=test_case.method, canonical_query=str(canonical_query)
    )
    assert actual_string_to_sign == test_case.string_to_sign
    actual_signature = signer.signature(
        string_to_sign=actual_string_to_sign,
        secret=test_case.identity.access_key_secret,
    )
    assert actual_signature == test_case.signature

    signed_request = signer.sign(
        request=AliyunRequest(
            destination=URI(host=SMS_HOST),
            method=test_case.method,
            parameters=test_case.parameters,
        ),
        identity=test_case.identity,
        properties=test_case.properties,
    )
    assert signed_request.parameters["Signature"] == test_case.signature


@freeze_time("2024-01-01 00:00:00")
def test_send_sms_url_with_captured_timestamp() -> None:
    url = RPCSigner().presign_url(
        host=SMS_HOST,
        parameters=SEND_SMS.parameters,
        identity=SEND_SMS.identity,
        properties=RPCSigningProperties(nonce="fixed-nonce"),
    )
    assert url == (
        f"https://{SMS_HOST}/?{SEND_SMS.canonical_query}"
        "&Signature=36nkKXxn%2BrLfnpsHmKPAN8S1k0I%3D"
    )


def test_sign_is_deterministic() -> None:
    signer = RPCSigner()
    request = AliyunRequest(
        destination=URI(host=SMS_HOST), parameters=SEND_SMS.parameters
    )
    first = signer.sign(
        request=request, identity=SEND_SMS.identity, properties=SEND_SMS.properties
    )
    second = signer.sign(
        request=request, identity=SEND_SMS.identity, properties=SEND_SMS.properties
    )
    assert first == second
    assert first.parameters["Signature"] == SEND_SMS.signature


def test_signature_changes_with_parameter_value() -> None:
    signer = RPCSigner()
    parameters = dict(SEND_SMS.parameters, PhoneNumbers="13800138001")
    signed = signer.sign(
        request=AliyunRequest(destination=URI(host=SMS_HOST), parameters=parameters),
        identity=SEND_SMS.identity,
        properties=SEND_SMS.properties,
    )
    assert signed.parameters["Signature"] != SEND_SMS.signature
