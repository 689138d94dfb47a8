# ===============================================
# tests/test_prompts.py
# Command matching and prompt composition.
# ===============================================

from src.pipeline.prompts import build_rules, compose_prompt, parse_command

RULES = build_rules()


def _parse(text):
    match = parse_command(text, RULES)
    if match is None:
        return None
    rule, argument = match
    return rule.label, argument


def test_topic_and_phrase_are_recognised():
    assert _parse("/topic cats") == ("TOPIC", "cats")
    assert _parse("/phrase  the sea at night ") == ("PHRASE", "the sea at night")


def test_plain_text_is_ignored():
    assert _parse("hello") is None
    assert _parse("") is None
    assert _parse("tell me a /topic cats") is None


def test_prefix_must_end_at_word_boundary():
    assert _parse("/topics cats") is None
    assert _parse("/phrasebook") is None


def test_empty_argument_is_reported_as_empty():
    assert _parse("/phrase ") == ("PHRASE", "")
    assert _parse("/topic") == ("TOPIC", "")


def test_group_mention_is_dropped():
    assert _parse("/topic@StoryBot dragons") == ("TOPIC", "dragons")
    assert _parse("/topic@StoryBot") == ("TOPIC", "")
    assert _parse("/topic@ dragons") is None


def test_mention_of_another_bot_is_ignored():
    assert parse_command("/topic@OtherBot cats", RULES, bot_username="story_bot") is None
    assert parse_command("/phrase@OtherBot", RULES, bot_username="story_bot") is None


def test_mention_of_own_bot_matches_case_insensitively():
    rule, argument = parse_command("/topic@Story_Bot cats", RULES, bot_username="story_bot")
    assert (rule.label, argument) == ("TOPIC", "cats")
    rule, argument = parse_command("/topic cats", RULES, bot_username="@story_bot")
    assert (rule.label, argument) == ("TOPIC", "cats")


def test_custom_command_table():
    rules = build_rules({"/poem": "POEM", "/poemlong": "LONG POEM"})
    rule, argument = parse_command("/poemlong rain", rules)
    assert rule.label == "LONG POEM"
    assert argument == "rain"


def test_compose_prompt():
    assert compose_prompt("Write a short story. ", "TOPIC", "cats") == "Write a short story. TOPIC: cats"
