"""
Document and blob identifiers.

Ids are 24 hex digits: a 4-byte creation timestamp followed by 8 random bytes,
the same shape as a MongoDB ObjectId so clients can treat them as opaque strings.
"""
import re
import secrets
import time

_OBJECT_ID_RE = re.compile(r"[0-9a-f]{24}")


def new_object_id() -> str:
    return f"{int(time.time()) & 0xFFFFFFFF:08x}{secrets.token_hex(8)}"


def is_object_id(value) -> bool:
    return isinstance(value, str) and bool(_OBJECT_ID_RE.fullmatch(value))
