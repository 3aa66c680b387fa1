import ipaddress

from src.registry.errors import AddressResolutionFailure


def _split_host(addr: str) -> str:
    if addr.startswith('['):
        end = addr.find(']')
        if end < 0:
            raise AddressResolutionFailure(f"IP of remote addr '{addr}' not found!")
        return addr[1:end]
    if addr.count(':') == 1:
        return addr.split(':', 1)[0]
    return addr


def normalize_ip(ip):
    """Collapse IPv4-mapped IPv6 (dual-stack sockets) to plain IPv4."""
    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        return ip.ipv4_mapped
    return ip


def remote_ip(addr):
    """
    Resolve the caller's IP from a remote address.
    Accepts 'a.b.c.d', 'a.b.c.d:port', '::1', '[::1]:port' or an ipaddress object.
    """
    if isinstance(addr, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return normalize_ip(addr)
    if not addr:
        raise AddressResolutionFailure('Remote address is missing')

    host = _split_host(addr.strip()).split('%', 1)[0]
    try:
        return normalize_ip(ipaddress.ip_address(host))
    except ValueError as exc:
        raise AddressResolutionFailure(f"IP of remote addr '{addr}' not found!") from exc


def format_peer(ip, port: int) -> str:
    if ip.version == 6:
        return f'[{ip}]:{port}'
    return f'{ip}:{port}'
