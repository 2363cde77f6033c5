import json
from types import SimpleNamespace

import pytest
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from jwcrypto import jwk


def generate_jwk(kid: str, alg: str, use: str) -> jwk.JWK:
    if alg.startswith("ES"):
        private_key = ec.generate_private_key(ec.SECP256R1())
    else:
        private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    key_dict = jwk.JWK.from_pyca(private_key).export(private_key=True, as_dict=True)
    key_dict.update({"kid": kid, "alg": alg, "use": use})
    return jwk.JWK(**key_dict)


def private_set(*keys: jwk.JWK) -> dict:
    return {"keys": [key.export(private_key=True, as_dict=True) for key in keys]}


def public_set(*keys: jwk.JWK) -> dict:
    return {"keys": [key.export_public(as_dict=True) for key in keys]}


@pytest.fixture(scope="session")
def party_keys():
    """RSA signing and encryption keys for both sides of the exchange."""
    return SimpleNamespace(
        client_sig=generate_jwk("client-sig", "RS256", "sig"),
        client_enc=generate_jwk("client-enc", "RSA-OAEP-256", "enc"),
        server_sig=generate_jwk("server-sig", "RS256", "sig"),
        server_enc=generate_jwk("server-enc", "RSA-OAEP-256", "enc"),
    )


@pytest.fixture
def key_set_files(tmp_path, party_keys):
    """Write each side's private set and the other side's public set to disk."""
    k = party_keys
    documents = {
        "client_private": private_set(k.client_sig, k.client_enc),
        "client_public": public_set(k.client_sig, k.client_enc),
        "server_private": private_set(k.server_sig, k.server_enc),
        "server_public": public_set(k.server_sig, k.server_enc),
    }
    paths = {}
    for name, document in documents.items():
        path = tmp_path / f"{name}.json"
        path.write_text(json.dumps(document))
        paths[name] = str(path)
    return SimpleNamespace(documents=documents, **paths)


class CountingSource:
    """In-memory key material source that records every fetch."""

    def __init__(self, documents: dict) -> None:
        self.documents = documents
        self.calls = []

    async def fetch(self, location: str):
        self.calls.append(location)
        return json.dumps(self.documents[location])

    async def is_reachable(self, url: str) -> bool:
        return url in self.documents


@pytest.fixture
def counting_source(party_keys):
    k = party_keys
    return CountingSource(
        {
            "client": private_set(k.client_sig, k.client_enc),
            "server": public_set(k.server_sig, k.server_enc),
        }
    )


@pytest.fixture
def source_factory():
    return CountingSource


@pytest.fixture
def jwk_helpers():
    return SimpleNamespace(generate=generate_jwk, private_set=private_set, public_set=public_set)


def flip_byte(envelope, segment, index=None):
    """Flip one byte inside a decoded segment and re-encode the envelope."""
    from mutualjose.utils.b64 import join_segments, split_segments

    parts = split_segments(envelope)
    data = bytearray(parts[segment])
    position = len(data) // 2 if index is None else index
    data[position] ^= 0x01
    parts[segment] = bytes(data)
    return join_segments(parts)


@pytest.fixture
def tamper():
    return flip_byte
