"""Unit tests for credential extraction."""

from vidtube.infrastructure.auth.token_extractor import extract_token, parse_bearer


class TestParseBearer:
    def test_valid_header(self):
        assert parse_bearer("Bearer abc.def.ghi") == "abc.def.ghi"

    def test_scheme_is_case_insensitive(self):
        assert parse_bearer("bearer abc") == "abc"

    def test_missing_header(self):
        assert parse_bearer(None) is None
        assert parse_bearer("") is None

    def test_other_scheme(self):
        assert parse_bearer("Basic dXNlcjpwYXNz") is None

    def test_malformed_header(self):
        assert parse_bearer("Bearer") is None
        assert parse_bearer("Bearer a b") is None


class TestExtractToken:
    def test_cookie_preferred_over_header(self):
        token = extract_token({"accessToken": "from-cookie"}, "Bearer from-header", "accessToken")

        assert token == "from-cookie"

    def test_falls_back_to_header(self):
        token = extract_token({}, "Bearer from-header", "accessToken")

        assert token == "from-header"

    def test_blank_cookie_falls_back_to_header(self):
        token = extract_token({"accessToken": "  "}, "Bearer from-header", "accessToken")

        assert token == "from-header"

    def test_other_cookie_names_are_ignored(self):
        assert extract_token({"refreshToken": "r"}, None, "accessToken") is None

    def test_nothing_presented(self):
        assert extract_token(None, None, "accessToken") is None
