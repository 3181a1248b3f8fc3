import re
import uuid

# Loose check: hex digits and hyphens, 36 chars (same as the store's uuid text form)
_UUID_LIKE = re.compile(r"^[0-9a-f-]{36}$", re.IGNORECASE)


def gen_id() -> str:
    return str(uuid.uuid4())


def is_uuid_like(value: str | None) -> bool:
    return bool(value) and _UUID_LIKE.fullmatch(value) is not None
