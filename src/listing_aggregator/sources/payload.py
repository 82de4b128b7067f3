from __future__ import annotations

import json
from typing import Any, List

from listing_aggregator.errors import SourceUnavailable


def parse_records(source_id: str, data: bytes, max_bytes: int) -> List[Any]:
    """Decode a dataset payload into its list of raw records.

    Accepts a top-level JSON array or an object with a "properties" array.
    Anything else is malformed content for the whole source.
    """

    if len(data) > max_bytes:
        raise SourceUnavailable(source_id, f"payload exceeds {max_bytes} bytes")
    try:
        payload = json.loads(data.decode("utf-8-sig", errors="replace"))
    except json.JSONDecodeError as exc:
        raise SourceUnavailable(source_id, f"malformed JSON: {exc.msg}") from exc
    except RecursionError as exc:
        raise SourceUnavailable(source_id, "malformed JSON: nested too deeply") from exc
    except ValueError as exc:
        raise SourceUnavailable(source_id, f"malformed JSON: {exc}") from exc
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get("properties"), list):
        return payload["properties"]
    raise SourceUnavailable(source_id, "payload is not a record list")
