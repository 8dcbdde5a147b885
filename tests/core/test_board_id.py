"""Board id extraction — precedence and pattern fallbacks.

Tests:
    - route > query > header > configured id > host > report URL
    - Blank candidates are skipped, not returned
    - Hex pattern is 24 chars after "webapi", case-insensitive
"""

from starlette.datastructures import Headers, QueryParams

from projects_api.core.error_report import extract_board_id

HEX_ID = "0123456789abcdef01234567"


def test_route_param_wins_over_everything():
    board_id = extract_board_id(
        path_params={"boardId": "route"},
        query_params={"boardId": "query"},
        headers={"x-board-id": "header"},
        host=f"webapi{HEX_ID}.up.railway.app",
        default_board_id="configured",
        report_url=f"https://webapi{HEX_ID}.example.com/errors",
    )
    assert board_id == "route"


def test_query_beats_header_and_configured():
    board_id = extract_board_id(
        query_params=QueryParams("boardId=query"),
        headers=Headers({"X-Board-Id": "header"}),
        default_board_id="configured",
    )
    assert board_id == "query"


def test_header_lookup_is_case_insensitive():
    headers = Headers(raw=[(b"x-board-id", b"from-header")])
    assert extract_board_id(headers=headers, default_board_id="configured") == "from-header"


def test_plain_dict_headers_with_canonical_name():
    assert extract_board_id(headers={"X-Board-Id": "h1"}) == "h1"


def test_configured_id_beats_host_pattern():
    board_id = extract_board_id(
        host=f"webapi{HEX_ID}.up.railway.app", default_board_id="configured",
    )
    assert board_id == "configured"


def test_host_pattern_extracts_hex_id():
    assert extract_board_id(host=f"webapi{HEX_ID}.up.railway.app") == HEX_ID


def test_host_pattern_is_case_insensitive():
    upper = HEX_ID.upper()
    assert extract_board_id(host=f"WEBAPI{upper}.up.railway.app") == upper


def test_report_url_is_last_resort():
    board_id = extract_board_id(
        host="localhost:8080",
        report_url=f"https://webapi{HEX_ID}.up.railway.app/api/runtime-error",
    )
    assert board_id == HEX_ID


def test_host_pattern_beats_report_url():
    other = "f" * 24
    board_id = extract_board_id(
        host=f"webapi{HEX_ID}.up.railway.app",
        report_url=f"https://webapi{other}.up.railway.app",
    )
    assert board_id == HEX_ID


def test_short_hex_does_not_match():
    assert extract_board_id(host="webapi0123abcd.up.railway.app") is None


def test_blank_candidates_are_skipped():
    board_id = extract_board_id(
        path_params={"boardId": ""},
        query_params={"boardId": "   "},
        headers={"x-board-id": ""},
        default_board_id="configured",
    )
    assert board_id == "configured"


def test_nothing_matches_returns_none():
    assert extract_board_id() is None
    assert extract_board_id(host="localhost", report_url="https://errors.example.com") is None
