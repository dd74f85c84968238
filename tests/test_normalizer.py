"""
Unit tests for request normalization (caller convention detection).
"""

import json
from urllib.parse import quote

import pytest

from storefront_gateway.api.normalizer import (
    EXTRACTORS,
    INVENTORY_FIELDS,
    SEARCH_FIELDS,
    UNKNOWN_TOOL_CALL_ID,
    coerce_limit,
    extract_body_envelope,
    extract_direct_tool_call,
    extract_query_envelope,
    inventory_args,
    normalize_call,
    parse_json_body,
    search_args,
)
from storefront_gateway.errors import ValidationError
from storefront_gateway.models import NormalizedCall, RawRequest


def envelope(arguments, call_id="call_1", extra_calls=()):
    return {"message": {"toolCallList": [{"id": call_id, "arguments": arguments}, *extra_calls]}}


class TestCoerceLimit:
    """Limits always land in [1, 50]."""

    @pytest.mark.parametrize("value, expected", [
        (3, 3),
        ("7", 7),
        (" 12 ", 12),
        (4.9, 4),
        (0, 1),
        (-5, 1),
        ("-3", 1),
        (51, 50),
        ("1000", 50),
        ("Infinity", 50),
        ("-Infinity", 1),
        (10 ** 400, 50),
        (-10 ** 400, 1),
        ("1" + "0" * 400, 50),
    ])
    def test_numeric_values_are_clamped(self, value, expected):
        assert coerce_limit(value, 20) == expected

    @pytest.mark.parametrize("value", [None, "", "abc", "NaN", [], {}, True])
    def test_non_numeric_values_use_default(self, value):
        assert coerce_limit(value, 20) == 20

    def test_default_itself_is_clamped(self):
        assert coerce_limit(None, 500) == 50


class TestParseJsonBody:
    def test_valid_json(self):
        assert parse_json_body(b'{"q": "shoe"}') == {"q": "shoe"}

    @pytest.mark.parametrize("raw", [None, b"", b"   ", b"{not json", b"\xff\xfe"])
    def test_malformed_or_empty_body_is_absent(self, raw):
        assert parse_json_body(raw) is None


class TestExtractors:
    def test_body_envelope_takes_first_tool_call_only(self):
        body = envelope({"q": "red shirt"}, extra_calls=[{"id": "call_2", "arguments": {"q": "ignored"}}])
        call = extract_body_envelope(RawRequest(body=body), SEARCH_FIELDS)
        assert call.tool_call_id == "call_1"
        assert call.arguments == {"q": "red shirt"}

    def test_function_parameters_are_used_when_arguments_missing(self):
        body = {"message": {"toolCallList": [
            {"id": "call_9", "function": {"name": "search_inventory", "parameters": {"q": "hat"}}}
        ]}}
        call = extract_body_envelope(RawRequest(body=body), SEARCH_FIELDS)
        assert call.arguments == {"q": "hat"}

    def test_function_arguments_json_string_is_decoded(self):
        body = {"message": {"toolCallList": [
            {"id": "call_3", "function": {"arguments": json.dumps({"q": "scarf", "limit": 2})}}
        ]}}
        call = extract_body_envelope(RawRequest(body=body), SEARCH_FIELDS)
        assert call.arguments == {"q": "scarf", "limit": 2}

    def test_tool_call_without_id_gets_sentinel(self):
        body = {"message": {"toolCallList": [{"arguments": {"q": "hat"}}]}}
        call = extract_body_envelope(RawRequest(body=body), SEARCH_FIELDS)
        assert call.tool_call_id == UNKNOWN_TOOL_CALL_ID

    def test_empty_tool_call_list_is_not_an_envelope(self):
        body = {"message": {"toolCallList": []}}
        assert extract_body_envelope(RawRequest(body=body), SEARCH_FIELDS) is None

    def test_direct_tool_call(self):
        body = {"toolCall": {"id": "call_5", "arguments": {"q": "boots"}}}
        call = extract_direct_tool_call(RawRequest(body=body), SEARCH_FIELDS)
        assert call.tool_call_id == "call_5"
        assert call.arguments == {"q": "boots"}

    def test_bare_arguments(self):
        body = {"arguments": {"q": "boots"}}
        call = extract_direct_tool_call(RawRequest(body=body), SEARCH_FIELDS)
        assert call.is_tool_call
        assert call.tool_call_id == UNKNOWN_TOOL_CALL_ID
        assert call.arguments == {"q": "boots"}

    def test_query_envelope(self):
        message = json.dumps(envelope({"q": "shoe", "limit": 3})["message"])
        call = extract_query_envelope(RawRequest(query_params={"message": message}), SEARCH_FIELDS)
        assert call.tool_call_id == "call_1"
        assert call.arguments == {"q": "shoe", "limit": 3}

    def test_query_envelope_still_percent_encoded(self):
        message = quote(json.dumps(envelope({"q": "shoe"})))
        call = extract_query_envelope(RawRequest(query_params={"message": message}), SEARCH_FIELDS)
        assert call.arguments == {"q": "shoe"}

    def test_unparseable_query_envelope_is_ignored(self):
        request = RawRequest(query_params={"message": "hello there"})
        assert extract_query_envelope(request, SEARCH_FIELDS) is None


class TestNormalizeCall:
    def test_extractor_order_is_fixed(self):
        assert [e.__name__ for e in EXTRACTORS] == [
            "extract_body_envelope",
            "extract_direct_tool_call",
            "extract_query_envelope",
            "extract_body_fields",
            "extract_query_fields",
        ]

    def test_body_envelope_beats_query_envelope_and_fields(self):
        request = RawRequest(
            query_params={"q": "from-query", "message": json.dumps(envelope({"q": "from-message"}, "call_q")["message"])},
            body=envelope({"q": "from-body"}, "call_b"),
        )
        call = normalize_call(request)
        assert call.tool_call_id == "call_b"
        assert call.arguments["q"] == "from-body"

    def test_query_envelope_beats_plain_fields(self):
        request = RawRequest(
            query_params={"q": "plain", "message": json.dumps(envelope({"q": "wrapped"})["message"])},
            body={"q": "plain-body"},
        )
        call = normalize_call(request)
        assert call.source == "query_envelope"
        assert call.arguments["q"] == "wrapped"

    def test_plain_body_beats_query_fields(self):
        call = normalize_call(RawRequest(query_params={"q": "query"}, body={"q": "body"}))
        assert call.source == "body"
        assert not call.is_tool_call

    def test_body_without_route_fields_falls_through_to_query(self):
        call = normalize_call(RawRequest(query_params={"q": "query"}, body={"unrelated": 1}))
        assert call.source == "query"
        assert call.arguments == {"q": "query"}

    def test_nothing_recognisable_yields_defaults(self):
        call = normalize_call(RawRequest(query_params={}, body=None))
        assert call == NormalizedCall()
        assert search_args(call, 20).model_dump() == {"query": "", "limit": 20, "cursor": None}

    def test_equivalent_shapes_produce_identical_search_args(self):
        query_string = RawRequest(query_params={"q": "shoe", "limit": "3"})
        plain_body = RawRequest(body={"q": "shoe", "limit": 3})
        body_envelope = RawRequest(body=envelope({"q": "shoe", "limit": 3}))
        query_envelope = RawRequest(query_params={"message": json.dumps(envelope({"q": "shoe", "limit": "3"})["message"])})
        direct = RawRequest(body={"toolCall": {"id": "x", "arguments": {"q": "shoe", "limit": 3}}})

        results = {
            search_args(normalize_call(request), 5)
            .model_dump_json()
            for request in (query_string, plain_body, body_envelope, query_envelope, direct)
        }
        assert results == {'{"query":"shoe","limit":3,"cursor":null}'}


class TestSearchArgs:
    def test_query_alias(self):
        args = search_args(NormalizedCall(arguments={"query": "hat"}), 5)
        assert args.query == "hat"

    def test_q_wins_over_query(self):
        args = search_args(NormalizedCall(arguments={"q": "cap", "query": "hat"}), 5)
        assert args.query == "cap"

    def test_empty_cursor_is_none(self):
        assert search_args(NormalizedCall(arguments={"cursor": ""}), 5).cursor is None

    def test_cursor_passthrough(self):
        assert search_args(NormalizedCall(arguments={"cursor": "abc"}), 5).cursor == "abc"


class TestInventoryArgs:
    def test_bare_ids_become_gids(self):
        args = inventory_args(NormalizedCall(arguments={"ids": "123, 456"}))
        assert args.variant_ids == [
            "gid://shopify/ProductVariant/123",
            "gid://shopify/ProductVariant/456",
        ]

    def test_gid_ids_pass_through(self):
        args = inventory_args(NormalizedCall(arguments={"variantIds": ["gid://shopify/ProductVariant/123"]}))
        assert args.variant_ids == ["gid://shopify/ProductVariant/123"]

    def test_numeric_list_entries(self):
        args = inventory_args(NormalizedCall(arguments={"variantIds": [123]}))
        assert args.variant_ids == ["gid://shopify/ProductVariant/123"]

    def test_missing_ids(self):
        with pytest.raises(ValidationError, match="Variant IDs are required"):
            inventory_args(NormalizedCall())

    def test_blank_ids(self):
        with pytest.raises(ValidationError, match="At least one valid variant ID is required"):
            inventory_args(NormalizedCall(arguments={"ids": " , "}))

    def test_too_many_ids(self):
        with pytest.raises(ValidationError, match="Maximum 50 variants"):
            inventory_args(NormalizedCall(arguments={"variantIds": [str(i) for i in range(51)]}))

    def test_inventory_fields_recognised_in_query(self):
        call = normalize_call(RawRequest(query_params={"ids": "1,2"}), INVENTORY_FIELDS)
        assert call.source == "query"
        assert len(inventory_args(call).variant_ids) == 2
