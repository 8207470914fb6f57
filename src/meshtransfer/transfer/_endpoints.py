"""
URL templates for the message exchange API.
"""

from __future__ import annotations

from urllib.parse import quote


def _segment(message_id: str) -> str:
    # Exactly one path segment; "." and ".." would be collapsed by URL normalization
    segment = quote(message_id, safe="")
    if segment in (".", ".."):
        return segment.replace(".", "%2E")
    return segment


class MailboxEndpoints:
    """Builds the endpoint URLs for one mailbox."""

    __slots__ = ("base_url", "mailbox_id")

    def __init__(self, base_url: str, mailbox_id: str) -> None:
        self.base_url = base_url.rstrip("/")
        self.mailbox_id = mailbox_id

    @property
    def _root(self) -> str:
        return f"{self.base_url}/messageexchange/{self.mailbox_id}"

    def outbox(self) -> str:
        """Collection endpoint: first chunk of an upload."""
        return f"{self._root}/outbox"

    def outbox_chunk(self, message_id: str, index: int) -> str:
        """Subsequent upload chunk, addressed by message id and 1-based index."""
        return f"{self._root}/outbox/{_segment(message_id)}/{index}"

    def inbox(self) -> str:
        """Inbox listing."""
        return f"{self._root}/inbox"

    def inbox_message(self, message_id: str) -> str:
        """Initial (or whole) download of a message."""
        return f"{self._root}/inbox/{_segment(message_id)}"

    def inbox_chunk(self, message_id: str, index: int) -> str:
        """Subsequent download chunk."""
        return f"{self._root}/inbox/{_segment(message_id)}/{index}"

    def __repr__(self) -> str:
        return f"<MailboxEndpoints {self._root!r}>"
