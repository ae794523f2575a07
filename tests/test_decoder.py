import pytest

from khrecipes.domain.decoder import decode_json_object
from khrecipes.domain.errors import ParseFailure


@pytest.mark.parametrize(
    "reply",
    (
        '{"name": "Toast"}',
        '  {"name": "Toast"}\n',
        'Here is your recipe:\n{"name": "Toast"}\nEnjoy!',
        '```json\n{"name": "Toast"}\n```',
        '[{"name": "Toast"}]',
        '[{"name": "Toast"}, 2]',
        'Fill in {name} like so: {"name": "Toast"}',
    ),
)
def test_finds_the_object(reply: str) -> None:
    assert decode_json_object(reply) == {"name": "Toast"}


def test_braces_inside_strings() -> None:
    reply = 'Sure! {"name": "Curly {fries}", "instructions": ["Fry } well"]} Done.'
    assert decode_json_object(reply) == {
        "name": "Curly {fries}",
        "instructions": ["Fry } well"],
    }


def test_first_object_wins() -> None:
    reply = '{"name": "First"} and also {"name": "Second"}'
    assert decode_json_object(reply)["name"] == "First"


@pytest.mark.parametrize(
    "reply",
    (
        "",
        "I could not work out a recipe from that.",
        '["not", "an", "object"]',
        '"just a string"',
        '{"name": "Toast", "ingredients": ["bread"',
    ),
)
def test_nothing_usable(reply: str) -> None:
    with pytest.raises(ParseFailure, match="Could not parse recipe"):
        decode_json_object(reply)
