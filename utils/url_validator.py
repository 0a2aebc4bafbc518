"""
SSRF Protection Module

Recipe imports fetch a user-supplied source URL from the server. URLs are
only fetched when they use http(s) and every address the host resolves to
is public.
"""

import ipaddress
import logging
import socket
from urllib.parse import urlparse

import requests

logger = logging.getLogger(__name__)

USER_AGENT = 'Mozilla/5.0 (compatible; HouseholdRecipeImporter/1.0)'
LOCALHOST_NAMES = {'localhost', 'localhost.localdomain'}


class SSRFError(Exception):
    """Raised when a URL fails SSRF validation or the response is too large."""
    pass


def is_private_ip(ip_str):
    """True for private, loopback, link-local and otherwise non-public addresses."""
    try:
        ip = ipaddress.ip_address(ip_str)
    except ValueError:
        return True  # Unparseable, treat as unsafe
    return (ip.is_private or ip.is_loopback or ip.is_reserved or
            ip.is_link_local or ip.is_multicast or ip.is_unspecified)


def is_safe_url(url):
    """
    Validate that a URL is safe to fetch.

    Returns (is_safe, error_message).
    """
    if not url:
        return False, "Empty URL"

    try:
        parsed = urlparse(url)
    except ValueError:
        return False, "Invalid URL format"

    if parsed.scheme not in ('http', 'https'):
        return False, f"Invalid scheme: {parsed.scheme or 'none'}. Only http and https are allowed."

    hostname = parsed.hostname
    if not hostname:
        return False, "No hostname in URL"
    if hostname.lower() in LOCALHOST_NAMES:
        return False, "Cannot access localhost"

    try:
        resolved = socket.getaddrinfo(hostname, None, socket.AF_UNSPEC, socket.SOCK_STREAM)
    except socket.gaierror:
        return False, f"Cannot resolve hostname: {hostname}"

    for _family, _type, _proto, _canon, sockaddr in resolved:
        if is_private_ip(sockaddr[0]):
            return False, f"Hostname resolves to private/internal IP: {sockaddr[0]}"

    return True, None


def safe_fetch(url, timeout=10, max_size=5 * 1024 * 1024):
    """
    GET a URL after SSRF validation, reading at most max_size bytes.

    Returns:
        requests.Response with its content fully read

    Raises:
        SSRFError: if the URL is blocked or the body is too large
        requests.RequestException: for network and HTTP errors
    """
    is_safe, error = is_safe_url(url)
    if not is_safe:
        logger.warning(f"Blocked fetch of {url}: {error}")
        raise SSRFError(error)

    response = requests.get(url, headers={'User-Agent': USER_AGENT}, timeout=timeout,
                            stream=True, allow_redirects=False)
    response.raise_for_status()

    content = b''
    for chunk in response.iter_content(chunk_size=8192):
        content += chunk
        if len(content) > max_size:
            response.close()
            raise SSRFError(f"Response exceeded maximum size of {max_size} bytes")

    response._content = content
    return response
