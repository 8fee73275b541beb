"""Tests for download tokens."""

from __future__ import annotations

import base64

from ncbridge.core.tokens import DownloadTokenService


class FakeClock:
    """Settable clock."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestDownloadTokenService:
    """Tests for DownloadTokenService."""

    def test_issue_and_verify(self) -> None:
        """Should accept a fresh token for its own path."""
        service = DownloadTokenService("s3cret", clock=FakeClock())
        token = service.issue("Documents/report.pdf")
        assert service.verify(token, "Documents/report.pdf") is True

    def test_token_is_reusable_until_expiry(self) -> None:
        """Should accept the same token more than once."""
        service = DownloadTokenService("s3cret", clock=FakeClock())
        token = service.issue("a.txt")
        assert service.verify(token, "a.txt")
        assert service.verify(token, "a.txt")

    def test_expired_token_rejected(self) -> None:
        """Should reject a token once its ttl has elapsed."""
        clock = FakeClock()
        service = DownloadTokenService("s3cret", clock=clock)
        token = service.issue("a.txt", ttl=60)

        clock.now += 60
        assert service.verify(token, "a.txt") is True
        clock.now += 1
        assert service.verify(token, "a.txt") is False

    def test_other_path_rejected(self) -> None:
        """Should bind the token to the path it was issued for."""
        service = DownloadTokenService("s3cret", clock=FakeClock())
        token = service.issue("a.txt")
        assert service.verify(token, "b.txt") is False

    def test_other_secret_rejected(self) -> None:
        """Should reject tokens signed with another secret."""
        clock = FakeClock()
        token = DownloadTokenService("one", clock=clock).issue("a.txt")
        assert DownloadTokenService("two", clock=clock).verify(token, "a.txt") is False

    def test_token_format(self) -> None:
        """Should encode expiry and hex signature."""
        service = DownloadTokenService("s3cret", clock=FakeClock(1000.0))
        decoded = base64.urlsafe_b64decode(service.issue("a.txt", ttl=10)).decode()
        expiry, signature = decoded.split("|")
        assert expiry == "1010"
        assert len(signature) == 64

    def test_malformed_tokens_rejected(self) -> None:
        """Should return False instead of raising on garbage input."""
        service = DownloadTokenService("s3cret", clock=FakeClock())
        bad = [
            "",
            "not-base64!!",
            base64.urlsafe_b64encode(b"no-separator").decode(),
            base64.urlsafe_b64encode(b"abc|deadbeef").decode(),
            base64.urlsafe_b64encode(b"\xff\xfe|x").decode(),
            "ünïcode",
        ]
        for token in bad:
            assert service.verify(token, "a.txt") is False
