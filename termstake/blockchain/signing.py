"""Signed transfer payloads for the settlement network

The network expects an Ed25519 signature over a time prefixed double SHA-256
of the JSON encoded transaction, with slashes and non latin-1 characters
escaped the way its own clients encode them.
"""
import hashlib
import json
import time
from typing import Any, Dict, Optional

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

HEX_TIME_SIZE = 14
TRANSACTION_TIMESTAMP_OFFSET = 2000000  # microseconds


def is_valid_private_key(key: Optional[str]) -> bool:
    if not key or len(key) != 64:
        return False
    try:
        bytes.fromhex(key)
    except ValueError:
        return False
    return True


def utime() -> int:
    return int(time.time() * 1000) * 1000


def hextime(timestamp: Optional[int] = None) -> str:
    if not isinstance(timestamp, int) or isinstance(timestamp, bool):
        timestamp = utime()
    return format(timestamp, 'x').rjust(HEX_TIME_SIZE, '0')[:HEX_TIME_SIZE]


def encode(obj: Any) -> str:
    if isinstance(obj, (dict, list)):
        s = json.dumps(obj, separators=(',', ':'), ensure_ascii=False)
    else:
        s = str(obj)
    s = s.replace('/', '\\/')
    return ''.join(c if ord(c) <= 0xff else '\\u' + format(ord(c), 'x') for c in s)


def sha256_hex(obj: Any) -> str:
    return hashlib.sha256(encode(obj).encode('utf-8')).hexdigest()


def transaction_hash(transaction: Dict[str, Any]) -> str:
    return hextime(transaction.get('timestamp')) + sha256_hex(sha256_hex(transaction))


def load_private_key(private_key: str) -> Ed25519PrivateKey:
    return Ed25519PrivateKey.from_private_bytes(bytes.fromhex(private_key))


def public_key_hex(private_key: str) -> str:
    return load_private_key(private_key).public_key().public_bytes(Encoding.Raw, PublicFormat.Raw).hex()


def sign(obj: Any, private_key: str) -> str:
    return load_private_key(private_key).sign(encode(obj).encode('latin-1')).hex()


def build_send_request(private_key: str, from_address: str, to_address: str, amount: str,
                       timestamp: Optional[int] = None) -> Dict[str, Any]:
    """Build the signed body of a ``Send`` transaction.

    ``amount`` is the integer base unit amount as a decimal string.
    """
    if not isinstance(timestamp, int) or isinstance(timestamp, bool):
        timestamp = utime() + TRANSACTION_TIMESTAMP_OFFSET
    transaction = {
        'type': 'Send',
        'to': to_address,
        'amount': amount,
        'timestamp': timestamp,
        'from': from_address,
    }
    return {
        'public_key': public_key_hex(private_key),
        'signature': sign(transaction_hash(transaction), private_key),
        'transaction': transaction,
    }


def json_body(payload: Dict[str, Any]) -> str:
    return json.dumps(payload, separators=(',', ':'), ensure_ascii=False)
