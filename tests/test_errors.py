"""Unit tests for cfahub.core.errors and locale/label lookup."""

from cfahub.config.content_config import label
from cfahub.core.errors import ContentValidationError, backend_failure, format_backend_error, validation_failure


class ApiError(Exception):
    def __init__(self, message=None, details=None, hint=None, code=None):
        super().__init__(message or "")
        self.message = message
        self.details = details
        self.hint = hint
        self.code = code


class TestFormatBackendError:
    def test_message_first(self):
        assert format_backend_error(ApiError("duplicate key", details="d")) == "duplicate key"

    def test_details_then_hint(self):
        assert format_backend_error(ApiError(details="row missing")) == "row missing"
        assert format_backend_error(ApiError(hint="check RLS")) == "check RLS"

    def test_dict_shape(self):
        assert format_backend_error({"error_description": "bad jwt"}) == "bad jwt"

    def test_code_fallback(self):
        text = format_backend_error(ApiError(code="42501"))
        assert "code=42501" in text

    def test_plain_exception_shown_once(self):
        assert format_backend_error(Exception("boom")) == "boom"

    def test_unlabelled_dict_is_dumped(self):
        assert format_backend_error({"status": 500}) == '{"status": 500}'

    def test_none(self):
        assert format_backend_error(None) == "Unknown error"

    def test_backend_failure_is_502(self):
        exc = backend_failure(ApiError("timeout"), "Listing")
        assert exc.status_code == 502
        assert exc.detail == "timeout"


class TestLabels:
    def test_validation_failure_localized(self):
        assert validation_failure(ContentValidationError("select_group"), "fr").detail == "Sélectionne au moins un groupe."
        assert validation_failure(ContentValidationError("select_group"), "en").status_code == 400

    def test_params_are_formatted(self):
        err = ContentValidationError("tsv_missing_tab", line=4)
        assert validation_failure(err, "fr").detail == "Ligne 4 : il manque une tabulation."

    def test_unknown_locale_falls_back_to_default(self):
        assert label("de", "root") == "Sans dossier"

    def test_unknown_key_returns_key(self):
        assert label("en", "nope") == "nope"
