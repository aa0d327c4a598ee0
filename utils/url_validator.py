"""
SSRF Protection Module

Validates URLs before the importer fetches them (recipe pages and their
images). Blocks localhost, private and reserved addresses, and any scheme
other than http(s).
"""

import ipaddress
import socket
from urllib.parse import urlparse

import requests

DEFAULT_HEADERS = {'User-Agent': 'Mozilla/5.0 (compatible; RecipeImporter/1.0)'}

LOCALHOST_ALIASES = {
    'localhost', 'localhost.localdomain',
    '127.0.0.1', '::1', '0.0.0.0',
}


class SSRFError(Exception):
    """Raised when a URL fails SSRF validation."""
    pass


def is_private_ip(ip_str):
    """True for private, loopback, reserved, link-local, multicast or unparseable addresses."""
    try:
        ip = ipaddress.ip_address(ip_str)
    except ValueError:
        return True
    if getattr(ip, 'ipv4_mapped', None):
        ip = ip.ipv4_mapped
    return (
        ip.is_private or
        ip.is_loopback or
        ip.is_reserved or
        ip.is_link_local or
        ip.is_multicast or
        ip.is_unspecified
    )


def is_safe_url(url, resolve=True):
    """
    Validate that a URL is safe to fetch.

    Args:
        url: URL to check
        resolve: Also resolve the hostname and check every address it maps to

    Returns:
        (is_safe, error_message) tuple
    """
    if not url or not isinstance(url, str):
        return False, "Empty URL"

    try:
        parsed = urlparse(url.strip())
        hostname = parsed.hostname
    except ValueError:
        return False, "Invalid URL format"

    if parsed.scheme not in ('http', 'https'):
        return False, f"Invalid scheme: {parsed.scheme or 'none'}. Only http and https are allowed."
    if not hostname:
        return False, "No hostname in URL"
    if hostname.lower() in LOCALHOST_ALIASES:
        return False, "Cannot access localhost"

    try:
        ipaddress.ip_address(hostname)
        if is_private_ip(hostname):
            return False, f"Cannot access private/internal IP: {hostname}"
        return True, None
    except ValueError:
        pass

    if not resolve:
        return True, None

    try:
        resolved = socket.getaddrinfo(hostname, None, socket.AF_UNSPEC, socket.SOCK_STREAM)
    except socket.gaierror:
        return False, f"Cannot resolve hostname: {hostname}"

    for _family, _socktype, _proto, _canonname, sockaddr in resolved:
        if is_private_ip(sockaddr[0]):
            return False, f"Hostname resolves to private/internal IP: {sockaddr[0]}"

    return True, None


def safe_fetch(url, headers=None, timeout=10, max_size=10 * 1024 * 1024):
    """
    Fetch a URL with SSRF protection and a response size cap.

    Redirects are not followed, since a redirect could point at an
    internal address that was never validated.

    Returns:
        requests.Response with its content fully read

    Raises:
        SSRFError: If the URL fails validation or the body is too large
        requests.RequestException: For network and HTTP errors
    """
    is_safe, error = is_safe_url(url)
    if not is_safe:
        raise SSRFError(error)

    response = requests.get(
        url,
        headers=headers or DEFAULT_HEADERS,
        timeout=timeout,
        stream=True,
        allow_redirects=False,
    )
    try:
        response.raise_for_status()
        if response.is_redirect:
            raise SSRFError(f"Redirects are not followed: {response.headers.get('location')}")

        content_length = response.headers.get('content-length')
        if content_length and content_length.isdigit() and int(content_length) > max_size:
            raise SSRFError(f"Response too large: {content_length} bytes (max {max_size})")

        chunks = []
        received = 0
        for chunk in response.iter_content(chunk_size=8192):
            received += len(chunk)
            if received > max_size:
                raise SSRFError(f"Response exceeded maximum size of {max_size} bytes")
            chunks.append(chunk)
    finally:
        response.close()

    response._content = b''.join(chunks)
    return response
