"""Print preview sub-client for the Kitchen CPQ API.

This is an internal module. Import from `client` instead.
"""

from client._base import BaseClient
from models.preview import PrintPreview


class PreviewClient(BaseClient):
    """Client for print preview endpoints (/preview/*).

    Requesting a preview finalizes the quote. From fees_config the server
    moves to print_preview first.
    """

    _BASE_PATH = "/preview"

    def request(self) -> PrintPreview:
        """Get the structured print preview, including its text rendering."""
        return PrintPreview(**self._post(self._BASE_PATH))

    def text(self) -> str:
        return self._post(f"{self._BASE_PATH}/text", raw=True)
