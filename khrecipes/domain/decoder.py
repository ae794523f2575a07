"""Pull a JSON object out of a model's reply.

Models are asked for bare JSON but like to wrap it in prose or code fences.
Try the whole reply first. If that is not an object, take the first ``{`` from
which a complete object decodes. Anything else is a `ParseFailure`. The object
is not checked against any schema.
"""

import json
from typing import Any

from khrecipes.domain.errors import ParseFailure


_DECODER = json.JSONDecoder()


def decode_json_object(text: str) -> dict[str, Any]:
    text = text.strip()
    try:
        obj = json.loads(text)
    except json.JSONDecodeError:
        pass
    else:
        if isinstance(obj, dict):
            return obj

    start = text.find("{")
    while start != -1:
        try:
            obj, _ = _DECODER.raw_decode(text, start)
        except json.JSONDecodeError:
            start = text.find("{", start + 1)
            continue
        return obj

    raise ParseFailure("Could not parse recipe")
