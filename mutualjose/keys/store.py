"""Immutable, indexed collection of JSON Web Keys."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from jwcrypto import jwk
from jwcrypto.common import JWException

from ..errors import AlgorithmNotProvisioned, MalformedKeySet
from .source import KeySetDocument

logger = logging.getLogger(__name__)


class KeyStore:
    """Keys parsed from a single JWK set document.

    Keys keep their document order. Lookups by algorithm and by key id go
    through indexes built once here; for both, the first key in the document
    wins.
    """

    def __init__(self, keys: List[jwk.JWK], location: Optional[str] = None) -> None:
        self._keys: Tuple[jwk.JWK, ...] = tuple(keys)
        self.location = location
        self._by_algorithm: Dict[str, jwk.JWK] = {}
        self._by_key_id: Dict[str, jwk.JWK] = {}
        for key in self._keys:
            alg = key.get("alg")
            if alg and alg not in self._by_algorithm:
                self._by_algorithm[alg] = key
            kid = key.get("kid")
            if kid and kid not in self._by_key_id:
                self._by_key_id[kid] = key

    @classmethod
    def parse(cls, document: KeySetDocument, location: Optional[str] = None) -> "KeyStore":
        """Build a store from raw JSON text/bytes or an already decoded mapping."""
        data = cls._decode(document, location)
        entries = data.get("keys")
        if not isinstance(entries, list):
            raise MalformedKeySet("document has no 'keys' list", location)

        keys = []
        for index, entry in enumerate(entries):
            if not isinstance(entry, Mapping):
                raise MalformedKeySet(f"key #{index} is not a JSON object", location)
            try:
                keys.append(jwk.JWK(**entry))
            except (JWException, TypeError, ValueError) as e:
                raise MalformedKeySet(f"key #{index} is invalid: {e}", location) from e
        return cls(keys, location=location)

    @staticmethod
    def _decode(document: KeySetDocument, location: Optional[str]) -> Mapping[str, Any]:
        if isinstance(document, (bytes, bytearray)):
            try:
                document = document.decode("utf-8")
            except UnicodeDecodeError as e:
                raise MalformedKeySet("document is not UTF-8", location) from e
        if isinstance(document, str):
            try:
                document = json.loads(document)
            except ValueError as e:
                raise MalformedKeySet("document is not valid JSON", location) from e
        if not isinstance(document, Mapping):
            raise MalformedKeySet("document is not a JSON object", location)
        return document

    @property
    def keys(self) -> Tuple[jwk.JWK, ...]:
        return self._keys

    @property
    def algorithms(self) -> List[str]:
        return list(self._by_algorithm)

    def find_by_algorithm(self, alg: str) -> Optional[jwk.JWK]:
        return self._by_algorithm.get(alg)

    def find_by_key_id(self, kid: str) -> Optional[jwk.JWK]:
        return self._by_key_id.get(kid)

    def require(self, alg: str) -> jwk.JWK:
        """Like :meth:`find_by_algorithm` but absence is an error."""
        key = self.find_by_algorithm(alg)
        if key is None:
            logger.debug(f"No key for algorithm {alg} in JWK set {self.location}")
            raise AlgorithmNotProvisioned(alg, self.location)
        return key

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[jwk.JWK]:
        return iter(self._keys)
