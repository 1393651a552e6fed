"""Subnet pool capacity accounting using prefix-set arithmetic"""
import ipaddress
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Union

from exceptions import InvalidPrefixError

IPNetwork = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]


def parse_prefix(prefix: str) -> IPNetwork:
    """Parse a CIDR string; host bits are masked off"""
    try:
        return ipaddress.ip_network(prefix, strict=False)
    except (ValueError, TypeError) as e:
        raise InvalidPrefixError(str(prefix), str(e)) from e


def _overlapping(pool: IPNetwork, subnets: Iterable[IPNetwork]) -> List[IPNetwork]:
    # overlaps() does not compare address families, so filter on version first
    return [s for s in subnets if s.version == pool.version and pool.overlaps(s)]


def free_blocks(pool: IPNetwork, subnets: Iterable[IPNetwork]) -> List[IPNetwork]:
    """Remove every subnet from pool and return the remainder as maximal aligned prefixes.

    Drawn subnets are collapsed into sorted, disjoint prefixes and the gaps
    between them are summarized in a single pass over the pool.
    """
    address = type(pool.network_address)
    blocks: List[IPNetwork] = []
    start = int(pool.network_address)

    for subnet in ipaddress.collapse_addresses(_overlapping(pool, subnets)):
        if pool.subnet_of(subnet):
            return []
        first = int(subnet.network_address)
        if first > start:
            blocks.extend(ipaddress.summarize_address_range(address(start), address(first - 1)))
        start = int(subnet.broadcast_address) + 1

    end = int(pool.broadcast_address)
    if start <= end:
        blocks.extend(ipaddress.summarize_address_range(address(start), address(end)))
    return blocks


def count_total_subnets(pool: IPNetwork, prefix_length: int) -> int:
    """Number of prefix_length subnets pool can hold"""
    return 2 ** (prefix_length - pool.prefixlen)


def count_used_subnets(pool: IPNetwork, subnets: Iterable[IPNetwork], prefix_length: int) -> int:
    """Number of drawn subnets of exactly prefix_length that overlap pool"""
    return sum(1 for s in _overlapping(pool, subnets) if s.prefixlen == prefix_length)


def count_free_in_blocks(blocks: Iterable[IPNetwork], prefix_length: int) -> int:
    """Number of prefix_length subnets that fit in already computed free blocks"""
    return sum(2 ** (prefix_length - block.prefixlen) for block in blocks if block.prefixlen <= prefix_length)


def count_free_subnets(pool: IPNetwork, subnets: Iterable[IPNetwork], prefix_length: int) -> int:
    """Number of prefix_length subnets that still fit in pool after removing every drawn subnet"""
    return count_free_in_blocks(free_blocks(pool, subnets), prefix_length)


@dataclass
class PrefixUsage:
    """Used/free/total subnets of one size within one pool prefix"""
    prefix: IPNetwork
    prefix_length: int
    total: int
    used: int
    free: int


@dataclass
class AddressPool:
    """A subnet pool together with the subnets allocated from it"""
    id: str
    name: str
    prefixes: Sequence[str]
    min_prefixlen: int
    max_prefixlen: int
    ip_version: int = 4
    project_id: str = ""
    subnets: List[IPNetwork] = field(default_factory=list)

    def networks(self) -> List[IPNetwork]:
        return [parse_prefix(p) for p in self.prefixes]

    def usage(self) -> Iterator[PrefixUsage]:
        """Yield usage for every pool prefix and every allowed prefix length"""
        for network in self.networks():
            drawn = _overlapping(network, self.subnets)
            blocks = free_blocks(network, drawn)
            used = Counter(s.prefixlen for s in drawn)
            for prefix_length in range(max(self.min_prefixlen, network.prefixlen), self.max_prefixlen + 1):
                yield PrefixUsage(
                    prefix=network,
                    prefix_length=prefix_length,
                    total=count_total_subnets(network, prefix_length),
                    used=used[prefix_length],
                    free=count_free_in_blocks(blocks, prefix_length),
                )


def pools_with_subnets(pools: Iterable, subnets: Iterable) -> List[AddressPool]:
    """Attach each subnet to the pool it was allocated from.

    ``pools`` are subnet pool records (id, name, prefixes, minimum_prefix_length,
    maximum_prefix_length, ip_version, project_id) and ``subnets`` are subnet
    records (cidr, subnet_pool_id). Subnets outside any pool are ignored.
    """
    by_pool: Dict[str, List[IPNetwork]] = {}
    for subnet in subnets:
        pool_id = getattr(subnet, "subnet_pool_id", None)
        if pool_id:
            by_pool.setdefault(pool_id, []).append(parse_prefix(subnet.cidr))

    result = []
    for pool in pools:
        result.append(AddressPool(
            id=pool.id,
            name=pool.name or "",
            prefixes=list(pool.prefixes or []),
            min_prefixlen=_as_int(pool.minimum_prefix_length, "minimum_prefix_length"),
            max_prefixlen=_as_int(pool.maximum_prefix_length, "maximum_prefix_length"),
            ip_version=_as_int(pool.ip_version, "ip_version"),
            project_id=pool.project_id or "",
            subnets=by_pool.get(pool.id, []),
        ))
    return result


def _as_int(value: Optional[Union[int, str]], field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"subnet pool {field_name} is not an integer: {value!r}") from e
