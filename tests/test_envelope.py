"""End-to-end tests for the sign-then-encrypt envelope exchange."""

import asyncio
import json

import pytest

from mutualjose.envelope import EnvelopeOrchestrator
from mutualjose.errors import (
    AlgorithmNotProvisioned,
    DecryptionFailed,
    KeySourceUnavailable,
    SignatureExpired,
    SignatureInvalid,
)
from mutualjose.keys.lazy import StoreState
from mutualjose.utils.b64 import decode_header


def client_and_server(key_set_files, **kwargs):
    client = EnvelopeOrchestrator(
        key_set_files.client_private, key_set_files.server_public, **kwargs
    )
    server = EnvelopeOrchestrator(
        key_set_files.server_private, key_set_files.client_public, **kwargs
    )
    return client, server


@pytest.mark.asyncio
async def test_client_request_server_response(key_set_files):
    client, server = client_and_server(key_set_files)

    request = await client.encrypt({"amount": 100})
    assert decode_header(request)["kid"] == "server-enc"
    received = await server.decrypt(request)
    assert received.payload == {"amount": 100}
    assert received.header["kid"] == "client-sig"

    response = await server.encrypt({"status": "COMPLETED", "amount": 100})
    assert decode_header(response)["kid"] == "client-enc"
    verified = await client.decrypt(response)
    assert verified.payload == {"status": "COMPLETED", "amount": 100}
    assert verified.header["kid"] == "server-sig"
    assert verified.header["alg"] == "RS256"
    assert verified.key_id == "server-sig"


@pytest.mark.asyncio
async def test_single_key_set_round_trip(key_set_files):
    # Both locations point at one private set holding every key.
    orchestrator = EnvelopeOrchestrator(
        key_set_files.client_private, key_set_files.client_private
    )
    envelope = await orchestrator.encrypt({"amount": 100})
    result = await orchestrator.decrypt(envelope)
    assert result.payload == {"amount": 100}
    assert result.header["kid"] == "client-sig"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [{"amount": 100}, [1, "two", None], "plain text", 42, {"nested": {"list": [True, 1.5]}}],
)
async def test_round_trip_payload_shapes(key_set_files, payload):
    client, server = client_and_server(key_set_files)
    result = await server.decrypt(await client.encrypt(payload))
    assert result.payload == payload


@pytest.mark.asyncio
async def test_lazy_init_fetches_each_store_once(counting_source):
    orchestrator = EnvelopeOrchestrator("client", "server", source=counting_source)
    assert orchestrator.client_key_store is None
    assert orchestrator.server_key_store is None

    await orchestrator.encrypt({"amount": 1})
    await orchestrator.encrypt({"amount": 2})

    assert sorted(counting_source.calls) == ["client", "server"]
    assert len(orchestrator.client_key_store) == 2
    assert len(orchestrator.server_key_store) == 2


@pytest.mark.asyncio
async def test_concurrent_first_calls_share_population(counting_source):
    orchestrator = EnvelopeOrchestrator("client", "server", source=counting_source)
    envelopes = await asyncio.gather(*(orchestrator.encrypt({"n": n}) for n in range(5)))
    assert len(envelopes) == 5
    assert sorted(counting_source.calls) == ["client", "server"]


@pytest.mark.asyncio
async def test_decrypt_loads_client_store_before_server(key_set_files, source_factory):
    _, server = client_and_server(key_set_files)
    response = await server.encrypt({"ok": True})

    source = source_factory(
        {
            "client": key_set_files.documents["client_private"],
            "server": key_set_files.documents["server_public"],
        }
    )
    fresh_client = EnvelopeOrchestrator("client", "server", source=source)
    result = await fresh_client.decrypt(response)
    assert result.payload == {"ok": True}
    assert source.calls == ["client", "server"]


@pytest.mark.asyncio
async def test_missing_signing_algorithm(key_set_files):
    client = EnvelopeOrchestrator(
        key_set_files.client_private, key_set_files.server_public, signing_algorithm="ES256"
    )
    with pytest.raises(AlgorithmNotProvisioned) as exc_info:
        await client.encrypt({"amount": 100})
    assert exc_info.value.algorithm == "ES256"


@pytest.mark.asyncio
async def test_server_set_with_only_ec_keys(tmp_path, key_set_files, jwk_helpers):
    ec_only = tmp_path / "ec_server.json"
    ec_only.write_text(
        json.dumps(
            jwk_helpers.public_set(
                jwk_helpers.generate("ec-sig", "ES256", "sig"),
            )
        )
    )
    _, server = client_and_server(key_set_files)
    response = await server.encrypt({"ok": True})

    misprovisioned = EnvelopeOrchestrator(key_set_files.client_private, str(ec_only))
    with pytest.raises(AlgorithmNotProvisioned) as exc_info:
        await misprovisioned.decrypt(response)
    assert exc_info.value.algorithm == "RS256"


@pytest.mark.asyncio
async def test_expired_response_is_rejected(key_set_files):
    server = EnvelopeOrchestrator(
        key_set_files.server_private,
        key_set_files.client_public,
        clock=lambda: 1_000_000_000.0,
    )
    client = EnvelopeOrchestrator(key_set_files.client_private, key_set_files.server_public)
    response = await server.encrypt({"amount": 100})
    with pytest.raises(SignatureExpired):
        await client.decrypt(response)


@pytest.mark.asyncio
async def test_tampered_envelope_is_rejected(key_set_files, tamper):
    client, server = client_and_server(key_set_files)
    response = await server.encrypt({"amount": 100})
    with pytest.raises(DecryptionFailed) as exc_info:
        await client.decrypt(tamper(response, 3))
    assert exc_info.value.key_id == "client-enc"


@pytest.mark.asyncio
async def test_forged_signature_is_rejected(key_set_files, tamper):
    client, server = client_and_server(key_set_files)
    signed = await server.sign_body({"amount": 100})
    forged = await server.encrypt_body(tamper(signed, 2))
    with pytest.raises(SignatureInvalid) as exc_info:
        await client.decrypt(forged)
    assert exc_info.value.key_id == "server-sig"


@pytest.mark.asyncio
async def test_step_methods_compose(key_set_files):
    client, server = client_and_server(key_set_files)
    signed = await client.sign_body({"amount": 100})
    encrypted = await client.encrypt_body(signed)
    decrypted = await server.decrypt_body(encrypted)
    assert decrypted == signed.encode("utf-8")
    result = await server.check_signature(decrypted)
    assert result.payload == {"amount": 100}


@pytest.mark.asyncio
async def test_unavailable_key_set(tmp_path, key_set_files):
    client = EnvelopeOrchestrator(str(tmp_path / "missing.json"), key_set_files.server_public)
    with pytest.raises(KeySourceUnavailable):
        await client.encrypt({"amount": 100})
    assert client._client_keys.state is StoreState.UNINITIALIZED


def test_load_key_set_installs_matching_store(key_set_files):
    client = EnvelopeOrchestrator("client.json", "server.json")
    client.load_key_set("client.json", key_set_files.documents["client_private"])
    assert client.client_key_store.find_by_algorithm("RS256").get("kid") == "client-sig"
    assert client.server_key_store is None

    client.load_key_set("server.json", json.dumps(key_set_files.documents["server_public"]))
    assert client.server_key_store.find_by_algorithm("RS256").get("kid") == "server-sig"


@pytest.mark.asyncio
async def test_preloaded_key_sets_skip_fetching(key_set_files, source_factory):
    source = source_factory({})
    client = EnvelopeOrchestrator("client.json", "server.json", source=source)
    client.load_key_set("client.json", key_set_files.documents["client_private"])
    client.load_key_set("server.json", key_set_files.documents["server_public"])
    await client.encrypt({"amount": 100})
    assert source.calls == []


@pytest.mark.asyncio
async def test_check_url_is_valid(counting_source):
    orchestrator = EnvelopeOrchestrator("client", "server", source=counting_source)
    assert await orchestrator.check_url_is_valid("server") is True
    assert await orchestrator.check_url_is_valid("elsewhere") is False
