from itertools import groupby

import pytest

from app.services.transcript_service import SavedMessage, aggregate_messages, format_transcript

SEQUENCES = [
    [],
    [SavedMessage("user", "Hi")],
    [SavedMessage("user", "Hi"), SavedMessage("assistant", "Hello"), SavedMessage("assistant", "how are you")],
    [
        SavedMessage("assistant", "Welcome."),
        SavedMessage("assistant", "Let's begin."),
        SavedMessage("user", "Sure"),
        SavedMessage("user", "I'm ready"),
        SavedMessage("user", "go ahead"),
        SavedMessage("system", "Call forwarded"),
        SavedMessage("assistant", "First question"),
        SavedMessage("user", "Okay"),
    ],
    [SavedMessage("user", "a"), SavedMessage("assistant", "b"), SavedMessage("user", "c")],
]


def test_empty_input_gives_empty_output():
    assert aggregate_messages([]) == []


def test_consecutive_same_speaker_messages_are_merged():
    messages = [
        SavedMessage("user", "Hi"),
        SavedMessage("assistant", "Hello"),
        SavedMessage("assistant", "how are you"),
    ]

    assert aggregate_messages(messages) == [
        SavedMessage("user", "Hi"),
        SavedMessage("assistant", "Hello how are you"),
    ]


@pytest.mark.parametrize("messages", SEQUENCES)
def test_no_adjacent_blocks_share_a_speaker(messages):
    grouped = aggregate_messages(messages)

    for previous, current in zip(grouped, grouped[1:]):
        assert previous.role != current.role


@pytest.mark.parametrize("messages", SEQUENCES)
def test_block_text_is_space_joined_source_text(messages):
    expected = [
        SavedMessage(role, " ".join(message.content for message in run))
        for role, run in groupby(messages, key=lambda message: message.role)
    ]

    assert aggregate_messages(messages) == expected


@pytest.mark.parametrize("messages", SEQUENCES)
def test_aggregation_is_idempotent(messages):
    once = aggregate_messages(messages)

    assert aggregate_messages(once) == once


def test_input_messages_are_not_mutated():
    messages = [SavedMessage("assistant", "Hello"), SavedMessage("assistant", "there")]

    aggregate_messages(messages)

    assert messages == [SavedMessage("assistant", "Hello"), SavedMessage("assistant", "there")]


def test_format_transcript_lists_each_message():
    text = format_transcript([SavedMessage("assistant", "Tell me about React."), SavedMessage("user", "It is a UI library.")])

    assert text == "- assistant: Tell me about React.\n- user: It is a UI library.\n"
