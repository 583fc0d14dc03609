# Tests for Langflow run response decoding.

import pytest

from flowchat.providers.normalizer import (
    InnerOutput,
    NestedRunShape,
    _TextCandidate,
    extract_text,
)


def _nested(*inner_results):
    return {"outputs": [{"outputs": [{"results": results} for results in inner_results]}]}


class TestFlatShapes:
    def test_bare_string(self):
        assert extract_text("plain reply") == "plain reply"

    def test_bare_whitespace_string_is_returned_as_is(self):
        assert extract_text("  padded  ") == "  padded  "

    def test_top_level_text(self):
        assert extract_text({"text": "hi"}) == "hi"

    def test_top_level_text_wins_over_other_fields(self):
        response = {
            "text": "flat",
            "message": {"text": "message"},
            "outputs": [{"outputs": [{"results": {"text": "nested"}}]}],
        }
        assert extract_text(response) == "flat"

    def test_message_object_text(self):
        assert extract_text({"message": {"text": "from message"}}) == "from message"

    def test_message_string(self):
        assert extract_text({"message": "from message string"}) == "from message string"

    def test_message_object_preferred_over_nested(self):
        response = {"message": {"text": "flat"}, **_nested({"text": "nested"})}
        assert extract_text(response) == "flat"

    def test_non_string_text_falls_through(self):
        response = {"text": 42, **_nested({"text": "nested"})}
        assert extract_text(response) == "nested"

    def test_empty_flat_text_is_not_a_result(self):
        assert extract_text({"text": ""}) is None
        assert extract_text("") is None

    def test_empty_flat_text_falls_through_to_nested(self):
        response = {"text": "", **_nested({"text": "nested"})}
        assert extract_text(response) == "nested"


class TestNestedShape:
    def test_results_text(self):
        assert extract_text({"outputs": [{"outputs": [{"results": {"text": "hello"}}]}]}) == "hello"

    def test_results_message_text(self):
        assert extract_text(_nested({"message": {"text": "msg"}})) == "msg"

    def test_results_message_data_text(self):
        response = {"outputs": [{"outputs": [{"results": {"message": {"data": {"text": "world"}}}}]}]}
        assert extract_text(response) == "world"

    def test_candidate_order_within_results(self):
        results = {"text": "direct", "message": {"text": "msg", "data": {"text": "data"}}}
        assert extract_text(_nested(results)) == "direct"

    def test_whitespace_candidate_is_skipped(self):
        results = {"text": "   ", "message": {"data": {"text": "data text"}}}
        assert extract_text(_nested(results)) == "data text"

    def test_whitespace_only_everywhere_is_absent(self):
        assert extract_text(_nested({"text": "   "}, {"message": {"text": "\n\t"}})) is None

    def test_later_inner_entry_used(self):
        response = _nested({"artifacts": {}}, {"text": "second"})
        assert extract_text(response) == "second"

    def test_later_outer_entry_used(self):
        response = {
            "outputs": [
                {"outputs": []},
                {"no_outputs": True},
                {"outputs": [{"results": {"text": "found"}}]},
            ]
        }
        assert extract_text(response) == "found"

    def test_reply_text_keeps_surrounding_whitespace(self):
        assert extract_text(_nested({"text": "  spaced\n"})) == "  spaced\n"

    @pytest.mark.parametrize(
        "response",
        [
            {"outputs": None},
            {"outputs": "nope"},
            {"outputs": [None, 3, "x", {"outputs": None}]},
            {"outputs": [{"outputs": [None, {"results": None}, {"results": [1, 2]}]}]},
            {"outputs": [{"outputs": [{"results": {"text": 5, "message": {"data": None}}}]}]},
        ],
    )
    def test_malformed_entries_do_not_raise(self, response):
        assert extract_text(response) is None

    def test_malformed_entries_before_valid_one(self):
        response = {
            "outputs": [
                None,
                {"outputs": [None, {"results": {"message": "not an object"}}]},
                {"outputs": [{"results": {"message": {"text": "ok"}}}]},
            ]
        }
        assert extract_text(response) == "ok"


class TestAbsence:
    @pytest.mark.parametrize("response", [{}, None, [], 12, 1.5, True, {"unrelated": "x"}])
    def test_unrecognised_input_is_absent(self, response):
        assert extract_text(response) is None


class TestShapeModels:
    def test_text_candidate_base_is_abstract(self):
        with pytest.raises(TypeError):
            _TextCandidate()

    def test_container_shapes_carry_no_candidate(self):
        assert not hasattr(NestedRunShape, "candidate")
        assert not hasattr(InnerOutput, "candidate")
