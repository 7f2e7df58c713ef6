import pytest

from domain.blob import BlobMetadata
from domain.errors import StoreUnavailableError
from infrastructure.stored_metadata import StoredMetadata, dump_metadata, load_metadata

HELLO_SHA256 = "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824"


class TestStoredMetadata:
    def test_dump_uses_wire_shape(self):
        metadata = BlobMetadata(digest=HELLO_SHA256, content_type="text/plain")
        assert dump_metadata(metadata) == {"shasum": HELLO_SHA256, "type": "text/plain"}

    def test_load_returns_domain_metadata(self):
        metadata = load_metadata("2cf24db", {"shasum": HELLO_SHA256, "type": "text/plain"})
        assert metadata == BlobMetadata(digest=HELLO_SHA256, content_type="text/plain")

    def test_load_ignores_unknown_keys(self):
        raw = {"shasum": HELLO_SHA256, "type": "image/png", "uploadedBy": "someone"}
        assert load_metadata("2cf24db", raw).content_type == "image/png"

    def test_empty_content_type_is_kept(self):
        assert load_metadata("2cf24db", {"shasum": HELLO_SHA256, "type": ""}).content_type == ""

    @pytest.mark.parametrize("raw", [
        None,
        "not a dict",
        {},
        {"shasum": HELLO_SHA256},
        {"type": "text/plain"},
        {"shasum": "short", "type": "text/plain"},
        {"shasum": HELLO_SHA256.upper(), "type": "text/plain"},
        {"shasum": HELLO_SHA256, "type": 42},
    ])
    def test_load_rejects_unexpected_shapes(self, raw):
        with pytest.raises(StoreUnavailableError):
            load_metadata("2cf24db", raw)

    def test_load_rejects_digest_not_matching_identifier(self):
        with pytest.raises(StoreUnavailableError) as exc_info:
            load_metadata("abcdef0", {"shasum": HELLO_SHA256, "type": "text/plain"})
        assert "does not match" in str(exc_info.value)

    def test_round_trip_through_model(self):
        metadata = BlobMetadata(digest=HELLO_SHA256, content_type="application/json")
        assert StoredMetadata.from_domain(metadata).to_domain() == metadata
