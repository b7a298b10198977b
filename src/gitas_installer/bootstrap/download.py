"""Secure download utilities with SSL certificate handling.

This module provides SSL-aware download functions that work correctly
on macOS Python builds where the system certificate store is not
accessible by default.
"""

from __future__ import annotations

import shutil
import ssl
from pathlib import Path
from typing import Dict, Optional
from urllib.request import Request, urlopen

import certifi

from gitas_installer import __version__

USER_AGENT = f"gitas-installer/{__version__}"


def get_ssl_context() -> ssl.SSLContext:
    """Get an SSL context that uses certifi's CA bundle.

    Returns:
        An SSL context configured with certifi's CA certificates.
    """
    return ssl.create_default_context(cafile=certifi.where())


def secure_urlopen(
    url: str,
    timeout: Optional[float] = None,
    headers: Optional[Dict[str, str]] = None,
):
    """Open a URL with proper SSL certificate verification.

    Args:
        url: The URL to open.
        timeout: Socket timeout in seconds. None blocks until the server
            answers.
        headers: Extra request headers.

    Returns:
        A file-like object for reading the response.

    Raises:
        URLError: If the URL cannot be opened.
        HTTPError: If the server answers with a non-success status.
        ValueError: If the URL is not HTTPS.
    """
    if not url.startswith("https://"):
        raise ValueError(f"Only HTTPS URLs are supported: {url}")

    request_headers = {"User-Agent": USER_AGENT}
    if headers:
        request_headers.update(headers)
    request = Request(url, headers=request_headers)

    ssl_context = get_ssl_context()
    if timeout is None:
        return urlopen(request, context=ssl_context)  # nosec B310
    return urlopen(request, timeout=timeout, context=ssl_context)  # nosec B310


def download_file(url: str, dest_path: Path, timeout: Optional[float] = None) -> None:
    """Download a file from a URL with proper SSL certificate verification.

    Redirects (GitHub serves assets from a CDN) are followed by urllib.

    Args:
        url: The URL to download from.
        dest_path: Path to save the downloaded file.
        timeout: Socket timeout in seconds.

    Raises:
        URLError: If the URL cannot be opened.
        ValueError: If the URL is not HTTPS.
        OSError: If the file cannot be written.
        http.client.HTTPException: If the connection drops mid-transfer.
    """
    with secure_urlopen(url, timeout=timeout) as response:
        with open(dest_path, "wb") as f:
            shutil.copyfileobj(response, f)
