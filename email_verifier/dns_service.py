"""
DNS Service Module

Provides the MX and TXT lookups used by domain validation.
"""

from typing import Optional, List, Dict
from abc import ABC, abstractmethod

import dns.exception
import dns.resolver


class DNSServiceBase(ABC):
    """Abstract base class for DNS services."""

    @abstractmethod
    def has_mx_record(self, domain: str) -> bool:
        """
        Check if at least one MX record exists for a domain.

        Args:
            domain: The domain to check

        Returns:
            True if MX record exists, False otherwise
        """
        pass

    @abstractmethod
    def get_txt_records(self, name: str) -> List[str]:
        """
        Get the TXT records published under a name.

        Args:
            name: The DNS name to query

        Returns:
            Record texts in DNS response order, empty on any lookup error
        """
        pass


class DNSService(DNSServiceBase):
    """
    Real DNS service that performs lookups with dnspython.

    Lookup errors are never raised to the caller: a failed MX query reads
    as "no MX", a failed TXT query as "no records".
    """

    def __init__(self, timeout: Optional[float] = None):
        """
        Initialize the DNS service.

        Args:
            timeout: DNS query timeout in seconds, None keeps the resolver default
        """
        self.timeout = timeout
        self._resolver = dns.resolver.Resolver()
        if timeout is not None:
            self._resolver.timeout = timeout
            self._resolver.lifetime = timeout

    def has_mx_record(self, domain: str) -> bool:
        try:
            answers = self._resolver.resolve(domain, 'MX')
            return len(answers) > 0
        except dns.exception.DNSException:
            # NXDOMAIN, NoAnswer, NoNameservers, Timeout, bad names
            return False

    def get_txt_records(self, name: str) -> List[str]:
        try:
            answers = self._resolver.resolve(name, 'TXT')
        except dns.exception.DNSException:
            return []

        records = []
        for rdata in answers:
            # One TXT record may be split into several character-strings
            records.append(b''.join(rdata.strings).decode('utf-8', errors='replace'))
        return records


class MockDNSService(DNSServiceBase):
    """
    Mock DNS service for tests, benchmarks and offline runs.

    Answers come from in-memory tables; names that are not configured
    behave like names without records.
    """

    def __init__(self, mx: Optional[Dict[str, bool]] = None,
                 txt: Optional[Dict[str, List[str]]] = None):
        """
        Initialize the mock DNS service.

        Args:
            mx: Dictionary mapping domains to their MX record status
                e.g., {'gmail.com': True, 'invalid.fake': False}
            txt: Dictionary mapping DNS names to their TXT record texts
                e.g., {'_dmarc.gmail.com': ['v=DMARC1; p=none']}
        """
        self.mx = mx or {}
        self.txt = txt or {}
        self.call_history = []

    def set_mx(self, domain: str, has_mx: bool):
        self.mx[domain] = has_mx

    def set_txt(self, name: str, records: List[str]):
        self.txt[name] = list(records)

    def has_mx_record(self, domain: str) -> bool:
        self.call_history.append(('has_mx_record', domain))
        return self.mx.get(domain, False)

    def get_txt_records(self, name: str) -> List[str]:
        self.call_history.append(('get_txt_records', name))
        return list(self.txt.get(name, []))

    def reset_history(self):
        """Reset the call history."""
        self.call_history = []
