"""Tests for alert fingerprinting — order independence and sensitivity."""

from __future__ import annotations

from alertwatch.alerts.fingerprint import _fnv1_64, fingerprint, label_tokens


class TestFnv1:
    def test_empty_input_is_offset_basis(self) -> None:
        assert _fnv1_64([]) == 0xCBF29CE484222325

    def test_known_vector(self) -> None:
        # FNV-1 64-bit of "a"
        assert _fnv1_64([b"a"]) == 0xAF63BD4C8601B7BE

    def test_chunking_does_not_matter(self) -> None:
        assert _fnv1_64([b"ab", b"c"]) == _fnv1_64([b"abc"])


class TestLabelTokens:
    def test_tokens_sorted(self) -> None:
        assert label_tokens({"2": "two", "1": "one"}) == [",1=one", ",2=two"]

    def test_empty(self) -> None:
        assert label_tokens({}) == []


class TestFingerprint:
    def test_same_labels_any_order(self) -> None:
        a = fingerprint("http://one_alerte", {"2": "two", "1": "one"})
        b = fingerprint("http://one_alerte", {"1": "one", "2": "two"})
        assert a == b

    def test_different_labels(self) -> None:
        a = fingerprint("http://one_alerte", {"2": "two", "1": "uno"})
        b = fingerprint("http://one_alerte", {"1": "one", "2": "two"})
        assert a != b

    def test_different_urls(self) -> None:
        labels = {"1": "one", "2": "two"}
        assert fingerprint("http://one_alerte", labels) != fingerprint(
            "http://another_alerte", labels
        )

    def test_extra_label_changes_identity(self) -> None:
        base = {"alertname": "InstanceDown"}
        assert fingerprint("u", base) != fingerprint("u", {**base, "instance": "db1"})

    def test_empty_url_and_labels(self) -> None:
        assert fingerprint("", {}) == 0xCBF29CE484222325

    def test_fits_in_64_bits(self) -> None:
        value = fingerprint("http://x", {"k": "v" * 200})
        assert 0 <= value < 2**64

    def test_deterministic(self) -> None:
        labels = {"alertname": "HighLoad", "severity": "warning"}
        assert fingerprint("http://p/graph", labels) == fingerprint("http://p/graph", dict(labels))
