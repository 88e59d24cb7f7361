"""Test package for DocChat.

Structure:
    - unit/: Individual function and class tests
    - integration/: HTTP API workflows through the ASGI app

PDFs are generated on the fly by conftest.make_pdf; the language model is
replaced by a fake completion client, so no API key is needed.
Leverages pytest with pytest-check for soft assertions.
"""
