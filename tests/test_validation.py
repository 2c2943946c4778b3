from passport.utils.validation import (
    EMPTY_URL_MESSAGE,
    INVALID_URL_MESSAGE,
    is_valid_slug,
    parse_github_url,
    validate_github_url,
    validate_repository_submission,
)


class TestValidateGithubUrl:
    def test_accepts_owner_repo(self):
        assert validate_github_url("https://github.com/psf/requests") is True

    def test_accepts_trailing_slash(self):
        assert validate_github_url("https://github.com/psf/requests/") is True

    def test_accepts_dots_dashes_underscores(self):
        assert validate_github_url("https://github.com/my-org/repo_name.js") is True

    def test_ignores_surrounding_whitespace(self):
        assert validate_github_url("  https://github.com/psf/requests  ") is True

    def test_rejects_http(self):
        assert validate_github_url("http://github.com/psf/requests") is False

    def test_rejects_other_host(self):
        assert validate_github_url("https://gitlab.com/psf/requests") is False

    def test_rejects_missing_repo(self):
        assert validate_github_url("https://github.com/psf") is False

    def test_rejects_extra_segments(self):
        assert validate_github_url("https://github.com/psf/requests/tree/main") is False

    def test_rejects_empty_and_non_strings(self):
        assert validate_github_url("") is False
        assert validate_github_url(None) is False
        assert validate_github_url(42) is False


class TestParseGithubUrl:
    def test_standard_url(self):
        assert parse_github_url("https://github.com/psf/requests") == ("psf", "requests")

    def test_trailing_slash(self):
        assert parse_github_url("https://github.com/psf/requests/") == ("psf", "requests")

    def test_keeps_casing(self):
        assert parse_github_url("https://github.com/Octo/Hello") == ("Octo", "Hello")

    def test_invalid_returns_none(self):
        assert parse_github_url("invalid-url") is None


class TestRepositorySubmission:
    def test_empty(self):
        assert validate_repository_submission("   ") == (False, EMPTY_URL_MESSAGE)

    def test_invalid(self):
        assert validate_repository_submission("not-a-url") == (False, INVALID_URL_MESSAGE)

    def test_valid(self):
        assert validate_repository_submission("https://github.com/o/r") == (True, None)


class TestSlug:
    def test_valid(self):
        assert is_valid_slug("my-repo_1.0") is True

    def test_invalid(self):
        assert is_valid_slug("") is False
        assert is_valid_slug("bad owner") is False
        assert is_valid_slug("a/b") is False
        assert is_valid_slug("o&") is False
