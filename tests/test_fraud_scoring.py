import pytest

from salesagent.fsm import states
from salesagent.services.fraud import needs_review, score_deltas, score_message


def _reasons(text, state, history_length=5):
    return [reason for reason, _delta in score_deltas(text, state, history_length)]


def test_test_order_and_random_keywords_add_their_deltas():
    assert score_message(0, "just testing", states.IDLE, 5) == 20
    assert score_message(0, "send me anything", states.IDLE, 5) == 15
    assert score_message(0, "testing random stuff", states.IDLE, 5) == 35


def test_early_address_is_flagged():
    assert "early_address" in _reasons("House 1, Road 2, Dhaka", states.COLLECTING_ADDRESS, history_length=1)
    assert "early_address" not in _reasons("House 1, Road 2, Dhaka", states.COLLECTING_ADDRESS, history_length=2)


def test_short_message_only_counts_in_collection_states():
    assert "short_message" in _reasons("ok", states.COLLECTING_NAME)
    assert "short_message" not in _reasons("ok", states.PRODUCT_INQUIRY)


def test_malformed_phone_only_counts_while_collecting_phone():
    assert score_message(0, "my number is 12345", states.COLLECTING_PHONE, 5) == 15
    assert score_message(0, "01712345678", states.COLLECTING_PHONE, 5) == 0
    assert score_message(0, "my number is 12345", states.COLLECTING_NAME, 5) == 0


def test_number_inside_a_sentence_is_not_malformed():
    assert "malformed_phone" not in _reasons("call me at 01712345678", states.COLLECTING_PHONE)
    assert "malformed_phone" not in _reasons("+880 1712-345678 eta", states.COLLECTING_PHONE)


def test_score_is_clamped_to_upper_bound():
    assert score_message(95, "testing random", states.IDLE, 5) == 100
    assert score_message(150, "hello", states.IDLE, 5) == 100


def test_score_never_drops_below_prior():
    assert score_message(40, "thanks", states.IDLE, 5) == 40
    assert score_message(None, "thanks", states.IDLE, 5) == 0


@pytest.mark.parametrize(
    "messages",
    [
        ["hi", "test", "x", "random", "01712345678", "ok", "anything", "test test"],
        ["testing"] * 10,
        ["a", "b", "c", "d"],
    ],
)
def test_score_stays_bounded_and_non_decreasing(messages):
    score = 0
    cycle = [states.IDLE, states.COLLECTING_NAME, states.COLLECTING_PHONE, states.COLLECTING_ADDRESS]
    for index, text in enumerate(messages):
        new_score = score_message(score, text, cycle[index % len(cycle)], index)
        assert 0 <= new_score <= 100
        assert new_score >= score
        score = new_score


def test_review_threshold_is_strictly_above_fifty():
    assert needs_review(51) is True
    assert needs_review(50) is False
